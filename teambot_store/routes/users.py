import logging
from typing import Dict

from azure.cosmos import exceptions
from fastapi import APIRouter, Depends, HTTPException, status

from ..database import BotDataProvider
from ..models import UserInfo, UserInfoUpdate
from .deps import get_data_provider

router = APIRouter()


@router.get("/opt-in-status", response_model=Dict[str, bool])
async def list_opt_in_status(provider: BotDataProvider = Depends(get_data_provider)):
    lookup = await provider.get_all_users_opt_in_status()
    if lookup is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="User store unavailable")
    return lookup


@router.get("/{user_id}", response_model=UserInfo, response_model_by_alias=False)
async def get_user_info(user_id: str, provider: BotDataProvider = Depends(get_data_provider)):
    user = await provider.get_user_info(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/{user_id}", response_model=UserInfo, response_model_by_alias=False)
async def set_user_info(
    user_id: str, update: UserInfoUpdate, provider: BotDataProvider = Depends(get_data_provider)
):
    try:
        await provider.set_user_info(update.tenant_id, user_id, update.opted_in, update.service_url)
    except exceptions.CosmosHttpResponseError as exc:
        logging.exception("Failed to save user info for %s", user_id)
        raise HTTPException(status_code=500, detail=f"Cosmos DB error: {exc.message}")
    return UserInfo(
        user_id=user_id,
        tenant_id=update.tenant_id,
        opted_in=update.opted_in,
        service_url=update.service_url,
    )
