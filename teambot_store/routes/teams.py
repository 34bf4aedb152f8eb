from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..database import BotDataProvider
from ..models import TeamInstallInfo, TeamInstallStatusRequest
from .deps import get_data_provider

router = APIRouter()


@router.get("/", response_model=List[TeamInstallInfo], response_model_by_alias=False)
async def list_installed_teams(provider: BotDataProvider = Depends(get_data_provider)):
    # An unreachable store shows up here as an empty list
    return await provider.get_installed_teams()


@router.get("/{team_id}", response_model=TeamInstallInfo, response_model_by_alias=False)
async def get_installed_team(team_id: str, provider: BotDataProvider = Depends(get_data_provider)):
    team = await provider.get_installed_team(team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


@router.post("/install-status", status_code=status.HTTP_204_NO_CONTENT)
async def update_install_status(
    request: TeamInstallStatusRequest, provider: BotDataProvider = Depends(get_data_provider)
):
    await provider.update_team_install_status(request.team, request.installed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
