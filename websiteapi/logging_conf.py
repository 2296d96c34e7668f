from logging.config import dictConfig

from websiteapi.config import config


def configure_logging(app_config=config) -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "class": "logging.Formatter",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "format": "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d - %(message)s",
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": "DEBUG",
                    "formatter": "console",
                },
            },
            "loggers": {
                "databases": {"handlers": ["default"], "level": "WARNING"},
                "websiteapi": {
                    "handlers": ["default"],
                    "level": app_config.LOG_LEVEL,
                    "propagate": False,
                },
            },
        }
    )
