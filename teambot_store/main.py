import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from .config import EnvSecretsHelper, get_settings
from .database import BotDataProvider
from .routes import teams, users
from .telemetry import LoggingTelemetry

logging.basicConfig(level=get_settings().LOG_LEVEL)


def create_data_provider() -> BotDataProvider:
	"""Build the accessor from process settings.

	No connection is opened here; the first store operation does that.
	"""
	return BotDataProvider(
		telemetry=LoggingTelemetry(),
		secrets=EnvSecretsHelper(),
		config=get_settings(),
	)


@asynccontextmanager
async def lifespan(app: FastAPI):
	app.state.data_provider = create_data_provider()
	try:
		yield
	finally:
		await app.state.data_provider.close()


app = FastAPI(title="Team Bot Data Store", lifespan=lifespan)

app.include_router(teams, prefix="/teams", tags=["Teams"])
app.include_router(users, prefix="/users", tags=["Users"])


@app.get("/health", tags=["health"])
async def health_check(request: Request):
	return {"status": "ok", "store": request.app.state.data_provider.state}
