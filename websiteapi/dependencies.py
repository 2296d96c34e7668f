import databases
from fastapi import Request

from websiteapi.config import GlobalConfig


def get_database(request: Request) -> databases.Database:
    return request.app.state.database


def get_app_config(request: Request) -> GlobalConfig:
    return request.app.state.config
