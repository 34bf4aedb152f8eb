import asyncio
from contextlib import suppress
from typing import Any, Callable, Dict, List, Optional, Protocol

from azure.core.exceptions import AzureError
from azure.cosmos import PartitionKey, exceptions
from azure.cosmos.aio import CosmosClient

from .config import require
from .models import TeamInstallInfo, UserInfo, UserOptInStatus
from .telemetry import SeverityLevel, Telemetry

# Request the minimum throughput by default
DEFAULT_REQUEST_THROUGHPUT = 400

SHARED_OFFER_DISABLED = "SharedOffer is Disabled"


class ConfigSource(Protocol):
	def get_config(self, name: str) -> Optional[str]: ...


class SecretSource(Protocol):
	def get_secret(self, name: str) -> Optional[str]: ...


class StoreState:
	UNINITIALIZED = "uninitialized"
	INITIALIZING = "initializing"
	READY = "ready"
	POISONED = "poisoned"
	CLOSED = "closed"


class BotDataProvider:
	"""Accessor for the bot's team and user records in Cosmos DB.

	Nothing touches the network until the first operation runs. That first
	operation schedules a single initialization task (connect, then create the
	database and both containers if needed) and every caller awaits the same
	task. A failed initialization is kept: later calls re-raise its error.
	"""

	def __init__(
		self,
		telemetry: Telemetry,
		secrets: SecretSource,
		config: ConfigSource,
		client_factory: Callable[..., Any] = CosmosClient,
	):
		self.telemetry = telemetry
		self.secrets = secrets
		self.config = config
		self._client_factory = client_factory
		self._initialize_task: Optional[asyncio.Task] = None
		self._client = None
		self._database = None
		self._teams_container = None
		self._users_container = None
		self._closed = False

	@property
	def state(self) -> str:
		if self._closed:
			return StoreState.CLOSED
		task = self._initialize_task
		if task is None:
			return StoreState.UNINITIALIZED
		if not task.done():
			return StoreState.INITIALIZING
		if task.cancelled() or task.exception() is not None:
			return StoreState.POISONED
		return StoreState.READY

	async def ensure_initialized(self) -> None:
		if self._closed:
			raise RuntimeError("Data store is closed")
		if self._initialize_task is None:
			self._initialize_task = asyncio.ensure_future(self._initialize())
		# shield so a caller being cancelled does not cancel the shared task
		await asyncio.shield(self._initialize_task)

	async def close(self) -> None:
		self._closed = True
		task = self._initialize_task
		if task is not None and not task.done():
			# let a running initialization finish so it never opens a client after close
			with suppress(Exception):
				await task
		if self._client is not None:
			await self._client.close()

	# =========================
	# TEAMS
	# =========================

	async def update_team_install_status(self, team: TeamInstallInfo, installed: bool) -> None:
		"""Save the team when the bot is installed, otherwise delete it.

		Storage failures are tracked and not raised.
		"""
		await self.ensure_initialized()

		try:
			if installed:
				await self._teams_container.upsert_item(body=team.model_dump(by_alias=True, mode="json"))
			else:
				await self._teams_container.delete_item(item=team.team_id, partition_key=team.team_id)
		except exceptions.CosmosResourceNotFoundError:
			self.telemetry.track_trace(
				f"Team {team.team_id} was not in the store, nothing to delete", SeverityLevel.WARNING
			)
		except AzureError as ex:
			self.telemetry.track_exception(ex)

	async def get_installed_teams(self) -> List[TeamInstallInfo]:
		await self.ensure_initialized()

		installed_teams: List[TeamInstallInfo] = []
		try:
			query = self._teams_container.query_items(query="SELECT * FROM c", max_item_count=-1)
			async for page in query.by_page():
				async for item in page:
					installed_teams.append(TeamInstallInfo.model_validate(item))
		except AzureError as ex:
			self.telemetry.track_exception(ex)
			return []

		return installed_teams

	async def get_installed_team(self, team_id: str) -> Optional[TeamInstallInfo]:
		await self.ensure_initialized()

		item = await self._read_item(self._teams_container, team_id)
		return TeamInstallInfo.model_validate(item) if item is not None else None

	# =========================
	# USERS
	# =========================

	async def get_user_info(self, user_id: str) -> Optional[UserInfo]:
		await self.ensure_initialized()

		item = await self._read_item(self._users_container, user_id)
		return UserInfo.model_validate(item) if item is not None else None

	async def get_all_users_opt_in_status(self) -> Optional[Dict[str, bool]]:
		"""Map every stored user id to its opt-in flag.

		Returns None when the scan fails, which is not the same as {} (no users).
		"""
		await self.ensure_initialized()

		lookup: Dict[str, bool] = {}
		try:
			query = self._users_container.query_items(
				query="SELECT c.id, c.optedIn FROM c", max_item_count=-1
			)
			async for page in query.by_page():
				async for item in page:
					status = UserOptInStatus.model_validate(item)
					lookup[status.user_id] = status.opted_in
		except Exception as ex:
			self.telemetry.track_exception(ex)
			return None

		return lookup

	async def set_user_info(self, tenant_id: str, user_id: str, opted_in: bool, service_url: str) -> None:
		# Write failures propagate; callers decide whether to retry
		await self.ensure_initialized()

		user_info = UserInfo(
			tenant_id=tenant_id,
			user_id=user_id,
			opted_in=opted_in,
			service_url=service_url,
		)
		await self._users_container.upsert_item(body=user_info.model_dump(by_alias=True, mode="json"))

	# =========================
	# INTERNAL
	# =========================

	async def _read_item(self, container, key: str) -> Optional[Dict[str, Any]]:
		try:
			return await container.read_item(item=key, partition_key=key)
		except exceptions.CosmosResourceNotFoundError:
			self.telemetry.track_trace(f"Item {key} not found in {container.id}", SeverityLevel.WARNING)
			return None
		except AzureError as ex:
			self.telemetry.track_exception(ex)
			return None

	async def _initialize(self) -> None:
		self.telemetry.track_trace("Initializing data store")

		endpoint_url = require(self.config.get_config("CosmosDBEndpointUrl"), "CosmosDBEndpointUrl")
		database_name = require(self.config.get_config("CosmosDBDatabaseName"), "CosmosDBDatabaseName")
		teams_collection_name = require(self.config.get_config("CosmosCollectionTeams"), "CosmosCollectionTeams")
		users_collection_name = require(self.config.get_config("CosmosCollectionUsers"), "CosmosCollectionUsers")
		key = require(self.secrets.get_secret("CosmosDBKey"), "CosmosDBKey")

		self._client = self._client_factory(endpoint_url, credential=key)

		use_shared_offer = True
		try:
			self._database = await self._client.create_database_if_not_exists(
				id=database_name, offer_throughput=DEFAULT_REQUEST_THROUGHPUT
			)
		except exceptions.CosmosHttpResponseError as ex:
			if SHARED_OFFER_DISABLED not in str(ex):
				raise
			self.telemetry.track_trace(
				"Database shared offer is disabled for the account, will provision throughput at container level",
				SeverityLevel.INFORMATION,
			)
			use_shared_offer = False
			self._database = await self._client.create_database_if_not_exists(id=database_name)

		container_throughput = None if use_shared_offer else DEFAULT_REQUEST_THROUGHPUT
		self._teams_container = await self._database.create_container_if_not_exists(
			id=teams_collection_name,
			partition_key=PartitionKey(path="/id"),
			offer_throughput=container_throughput,
		)
		self._users_container = await self._database.create_container_if_not_exists(
			id=users_collection_name,
			partition_key=PartitionKey(path="/id"),
			offer_throughput=container_throughput,
		)

		self.telemetry.track_trace("Data store initialized")
