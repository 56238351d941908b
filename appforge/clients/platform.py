"""Client for the hosting control plane.

Provisions isolated databases, runs statements against them, and publishes
tenant scripts into a dispatch namespace. Every call carries the account's
bearer token; nothing is retried.
"""

import json
from typing import Any

import httpx

from ..config import Settings, get_settings
from ..exceptions import GatewayError
from ..logging_config import get_logger
from ..schemas import DatabaseInfo, ServiceDeployment
from .assets import AssetPublisher, StaticAsset
from .http import parse_envelope, raise_for_status, send

logger = get_logger(__name__)

DOCUMENT_PATH = "/index.html"


class PlatformGateway:
    """Stateless control-plane client."""

    def __init__(
        self,
        account_id: str,
        api_token: str,
        *,
        base_url: str = "https://api.cloudflare.com/client/v4",
        namespace: str = "user-apps",
        compatibility_date: str = "2024-01-01",
        timeout: float = 30.0,
    ):
        """Initialize the gateway.

        Args:
            account_id: Control-plane account that owns every tenant resource.
            api_token: Primary bearer credential.
            base_url: Control-plane API root.
            namespace: Dispatch namespace for tenant scripts.
            compatibility_date: Runtime compatibility date for deployed scripts.
            timeout: Per-call timeout in seconds.
        """
        self.account_id = account_id
        self.namespace = namespace
        self.compatibility_date = compatibility_date
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=timeout,
        )
        self.assets = AssetPublisher(self._client, account_id, namespace)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PlatformGateway":
        """Build a gateway from settings.

        Raises:
            ConfigurationError: If the account ID or API token is missing.
        """
        settings = settings or get_settings()
        account_id, api_token = settings.require_control_plane()
        return cls(
            account_id,
            api_token,
            base_url=settings.control_plane_url,
            namespace=settings.dispatch_namespace,
            compatibility_date=settings.compatibility_date,
            timeout=settings.http_timeout,
        )

    async def __aenter__(self) -> "PlatformGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _database_path(self, database_id: str | None = None) -> str:
        path = f"/accounts/{self.account_id}/d1/database"
        return f"{path}/{database_id}" if database_id else path

    def _script_path(self, script_name: str) -> str:
        return (
            f"/accounts/{self.account_id}/workers/dispatch/namespaces/{self.namespace}"
            f"/scripts/{script_name}"
        )

    # === Databases ===

    async def create_database(self, name: str) -> str:
        """Create an isolated database and return its identifier."""
        action = "Create database"
        resp = await send(
            self._client, "POST", self._database_path(), action=action, json={"name": name}
        )
        envelope = parse_envelope(resp, action)

        info = DatabaseInfo.model_validate(envelope.result or {})
        if not info.identifier:
            raise GatewayError(
                f"{action} returned no identifier",
                status_code=resp.status_code,
                detail=json.dumps(envelope.result),
            )

        logger.info("database_created", name=name, database_id=info.identifier)
        return info.identifier

    async def run_statement(self, database_id: str, sql: str) -> Any:
        """Run one SQL statement against a database. Returns the raw result payload."""
        action = "Database query"
        resp = await send(
            self._client,
            "POST",
            f"{self._database_path(database_id)}/query",
            action=action,
            json={"sql": sql},
        )
        return parse_envelope(resp, action).result

    async def delete_database(self, database_id: str) -> None:
        action = "Delete database"
        resp = await send(self._client, "DELETE", self._database_path(database_id), action=action)
        parse_envelope(resp, action)
        logger.info("database_deleted", database_id=database_id)

    # === Scripts ===

    async def deploy_service(self, deployment: ServiceDeployment) -> None:
        """Publish the static document, then upload the script with its bindings.

        The metadata references the completion token from the asset publish,
        so asset upload must finish before the script upload starts.
        """
        completion_token = await self.assets.publish(
            deployment.script_name,
            [StaticAsset.from_text(DOCUMENT_PATH, deployment.document, "text/html")],
        )

        main_module = f"{deployment.script_name}.mjs"
        metadata = {
            "main_module": main_module,
            "compatibility_date": self.compatibility_date,
            "assets": {"jwt": completion_token},
            "bindings": [
                {"type": "d1_database", "name": "DB", "database_id": deployment.database_id},
                {"type": "r2_bucket", "name": "STORAGE", "bucket_name": deployment.bucket_name},
                {"type": "secret_text", "name": "JWT_SECRET", "text": deployment.secret},
                {"type": "assets", "name": "ASSETS"},
            ],
        }
        files = [
            ("metadata", ("metadata.json", json.dumps(metadata), "application/json")),
            (
                main_module,
                (main_module, deployment.script_content, "application/javascript+module"),
            ),
        ]

        action = "Deploy service"
        resp = await send(
            self._client,
            "PUT",
            self._script_path(deployment.script_name),
            action=action,
            files=files,
        )
        raise_for_status(resp, action)
        logger.info(
            "service_deployed",
            script_name=deployment.script_name,
            database_id=deployment.database_id,
        )

    async def delete_service(self, script_name: str) -> None:
        action = "Delete service"
        resp = await send(self._client, "DELETE", self._script_path(script_name), action=action)
        raise_for_status(resp, action)
        logger.info("service_deleted", script_name=script_name)
