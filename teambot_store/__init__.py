from .config import EnvSecretsHelper, Settings, StoreConfigurationError, get_settings
from .database import BotDataProvider, StoreState
from .models import TeamInstallInfo, UserInfo
from .telemetry import LoggingTelemetry, SeverityLevel, Telemetry

__all__ = [
    "BotDataProvider",
    "EnvSecretsHelper",
    "LoggingTelemetry",
    "Settings",
    "SeverityLevel",
    "StoreConfigurationError",
    "StoreState",
    "TeamInstallInfo",
    "Telemetry",
    "UserInfo",
    "get_settings",
]
