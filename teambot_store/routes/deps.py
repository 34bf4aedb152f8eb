from fastapi import Request

from ..database import BotDataProvider


def get_data_provider(request: Request) -> BotDataProvider:
    return request.app.state.data_provider
