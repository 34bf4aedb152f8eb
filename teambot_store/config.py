import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class StoreConfigurationError(RuntimeError):
    """Raised when a required store setting or secret is missing."""


class Settings:
    # Setting names match the bot's app settings so existing deployments keep working
    COSMOS_DB_ENDPOINT_URL = os.getenv("CosmosDBEndpointUrl")
    COSMOS_DB_DATABASE_NAME = os.getenv("CosmosDBDatabaseName", "teambot")
    COSMOS_COLLECTION_TEAMS = os.getenv("CosmosCollectionTeams", "TeamsInfo")
    COSMOS_COLLECTION_USERS = os.getenv("CosmosCollectionUsers", "UsersInfo")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    _config_keys = {
        "CosmosDBEndpointUrl": "COSMOS_DB_ENDPOINT_URL",
        "CosmosDBDatabaseName": "COSMOS_DB_DATABASE_NAME",
        "CosmosCollectionTeams": "COSMOS_COLLECTION_TEAMS",
        "CosmosCollectionUsers": "COSMOS_COLLECTION_USERS",
    }

    def get_config(self, name: str) -> Optional[str]:
        """Look up a setting by its app-settings name.

        Names without a dedicated attribute fall through to the environment.
        """
        attr = self._config_keys.get(name)
        if attr is not None:
            return getattr(self, attr)
        return os.getenv(name)


class EnvSecretsHelper:
    """Secret source backed by environment variables (or a .env file)."""

    def get_secret(self, name: str) -> Optional[str]:
        return os.getenv(name)


settings = Settings()


def get_settings() -> Settings:
    return settings


def require(value: Optional[str], name: str) -> str:
    if not value:
        raise StoreConfigurationError(f"{name} not configured in environment")
    return value
