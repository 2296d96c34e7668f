from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    ENV_STATE: Optional[str] = "dev"

    """Loads the dotenv file."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class GlobalConfig(BaseConfig):
    DATABASE_URL: str = "sqlite:///website.db"
    DB_FORCE_ROLL_BACK: bool = False
    DB_CREATE_SCHEMA: bool = False
    # Homepage lookup
    HOMEPAGE_MODULE_NAME: str = "Website"
    HOMEPAGE_FORM_NAME: str = "Homepage"
    PUBLISHED_STATUS: str = "published"
    # Error bodies
    EXPOSE_ERROR_DETAILS: bool = False
    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:5173",
    ]
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000


class DevConfig(GlobalConfig):
    LOG_LEVEL: str = "DEBUG"
    model_config = SettingsConfigDict(env_prefix="DEV_")


class ProdConfig(GlobalConfig):
    model_config = SettingsConfigDict(env_prefix="PROD_")


class TestConfig(GlobalConfig):
    DATABASE_URL: str = "sqlite:///test.db"
    DB_FORCE_ROLL_BACK: bool = True
    model_config = SettingsConfigDict(env_prefix="TEST_")


@lru_cache()
def get_config(env_state: Optional[str]):
    """Instantiate config based on the environment."""
    configs = {"dev": DevConfig, "prod": ProdConfig, "test": TestConfig}
    return configs[env_state or "dev"]()


config = get_config(BaseConfig().ENV_STATE)
