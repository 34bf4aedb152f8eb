from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TeamInstallInfo(BaseModel):
    """Installation state of the bot in one team, keyed by team id."""

    team_id: str = Field(alias="id")
    tenant_id: str = Field(default="", alias="tenantId")
    service_url: str = Field(default="", alias="serviceUrl")
    installer_name: Optional[str] = Field(default=None, alias="installerName")
    installed_at: datetime = Field(default_factory=_utcnow, alias="installedAt")

    class Config:
        populate_by_name = True


class UserInfo(BaseModel):
    """A user's opt-in preference, keyed by user id."""

    user_id: str = Field(alias="id")
    tenant_id: str = Field(default="", alias="tenantId")
    opted_in: bool = Field(default=False, alias="optedIn")
    service_url: str = Field(default="", alias="serviceUrl")

    class Config:
        populate_by_name = True


class UserOptInStatus(BaseModel):
    user_id: str = Field(alias="id")
    opted_in: bool = Field(default=False, alias="optedIn")

    class Config:
        populate_by_name = True


class TeamInstallStatusRequest(BaseModel):
    team: TeamInstallInfo
    installed: bool


class UserInfoUpdate(BaseModel):
    tenant_id: str
    opted_in: bool
    service_url: str
