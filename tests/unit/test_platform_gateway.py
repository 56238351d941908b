"""Tests for the control-plane gateway."""

import json

import httpx
import pytest
import respx

from appforge.clients import PlatformGateway
from appforge.clients.assets import content_digest
from appforge.config import Settings
from appforge.exceptions import ConfigurationError, GatewayError
from appforge.schemas import ServiceDeployment
from tests.conftest import ACCOUNT_ID, CONTROL_PLANE, NAMESPACE

DATABASES_URL = f"{CONTROL_PLANE}/accounts/{ACCOUNT_ID}/d1/database"
SCRIPT_URL = (
    f"{CONTROL_PLANE}/accounts/{ACCOUNT_ID}/workers/dispatch/namespaces/{NAMESPACE}/scripts/app-p1"
)
SESSION_URL = f"{SCRIPT_URL}/assets-upload-session"
UPLOAD_URL = f"{CONTROL_PLANE}/accounts/{ACCOUNT_ID}/workers/assets/upload"

DOCUMENT = "<!doctype html><title>todo</title>"


def envelope(result=None, success=True, errors=None) -> dict:
    return {"success": success, "result": result, "errors": errors or [], "messages": []}


@pytest.fixture
async def gateway(settings):
    async with PlatformGateway.from_settings(settings) as gw:
        yield gw


@pytest.fixture
def deployment() -> ServiceDeployment:
    return ServiceDeployment(
        script_name="app-p1",
        script_content="export default { fetch() { return new Response('ok'); } };",
        document=DOCUMENT,
        database_id="db-123",
        bucket_name="user-code",
        secret="s3cr3t",
    )


class TestFromSettings:
    def test_missing_credentials_raise_configuration_error(self):
        settings = Settings(_env_file=None, cloudflare_account_id=None, cloudflare_api_token=None)

        with pytest.raises(ConfigurationError, match="CLOUDFLARE_API_TOKEN"):
            PlatformGateway.from_settings(settings)

    @pytest.mark.asyncio
    async def test_settings_are_applied(self, settings):
        async with PlatformGateway.from_settings(settings) as gw:
            assert gw.account_id == ACCOUNT_ID
            assert gw.namespace == NAMESPACE
            assert gw.compatibility_date == "2024-01-01"


class TestDatabases:
    @pytest.mark.asyncio
    async def test_create_database_returns_identifier(self, gateway):
        async with respx.mock() as respx_mock:
            route = respx_mock.post(DATABASES_URL).mock(
                return_value=httpx.Response(
                    200, json=envelope({"uuid": "db-123", "name": "app-p1"})
                )
            )

            database_id = await gateway.create_database("app-p1")

        assert database_id == "db-123"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer primary-token"
        assert json.loads(request.content) == {"name": "app-p1"}

    @pytest.mark.asyncio
    async def test_create_database_accepts_legacy_identifier_field(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.post(DATABASES_URL).mock(
                return_value=httpx.Response(200, json=envelope({"database_id": "legacy-1"}))
            )

            assert await gateway.create_database("app-p1") == "legacy-1"

    @pytest.mark.asyncio
    async def test_create_database_without_identifier_raises(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.post(DATABASES_URL).mock(
                return_value=httpx.Response(200, json=envelope({"name": "app-p1"}))
            )

            with pytest.raises(GatewayError, match="no identifier"):
                await gateway.create_database("app-p1")

    @pytest.mark.asyncio
    async def test_create_database_rejection_includes_errors(self, gateway):
        errors = [{"code": 7502, "message": "A database with that name already exists"}]
        async with respx.mock() as respx_mock:
            respx_mock.post(DATABASES_URL).mock(
                return_value=httpx.Response(400, json=envelope(success=False, errors=errors))
            )

            with pytest.raises(GatewayError) as exc_info:
                await gateway.create_database("app-p1")

        assert exc_info.value.status_code == 400
        assert "already exists" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_success_flag_false_is_a_failure_even_on_200(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.post(f"{DATABASES_URL}/db-123/query").mock(
                return_value=httpx.Response(
                    200, json=envelope(success=False, errors=[{"message": "syntax error"}])
                )
            )

            with pytest.raises(GatewayError, match="syntax error"):
                await gateway.run_statement("db-123", "CREATE TABL x;")

    @pytest.mark.asyncio
    async def test_run_statement_posts_sql(self, gateway):
        async with respx.mock() as respx_mock:
            route = respx_mock.post(f"{DATABASES_URL}/db-123/query").mock(
                return_value=httpx.Response(200, json=envelope([{"results": []}]))
            )

            result = await gateway.run_statement("db-123", "CREATE TABLE a (x INT);")

        assert result == [{"results": []}]
        assert json.loads(route.calls.last.request.content) == {"sql": "CREATE TABLE a (x INT);"}

    @pytest.mark.asyncio
    async def test_unreadable_response_raises(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.post(f"{DATABASES_URL}/db-123/query").mock(
                return_value=httpx.Response(502, text="<html>Bad gateway</html>")
            )

            with pytest.raises(GatewayError, match="unreadable") as exc_info:
                await gateway.run_statement("db-123", "SELECT 1;")

        assert exc_info.value.status_code == 502
        assert "Bad gateway" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_delete_database(self, gateway):
        async with respx.mock() as respx_mock:
            route = respx_mock.delete(f"{DATABASES_URL}/db-123").mock(
                return_value=httpx.Response(200, json=envelope(None))
            )

            await gateway.delete_database("db-123")

        assert route.called

    @pytest.mark.asyncio
    async def test_delete_missing_database_raises(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.delete(f"{DATABASES_URL}/gone").mock(
                return_value=httpx.Response(
                    404, json=envelope(success=False, errors=[{"message": "not found"}])
                )
            )

            with pytest.raises(GatewayError) as exc_info:
                await gateway.delete_database("gone")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_timeout_becomes_gateway_error(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.post(DATABASES_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

            with pytest.raises(GatewayError, match="timed out"):
                await gateway.create_database("app-p1")

    @pytest.mark.asyncio
    async def test_connection_error_becomes_gateway_error(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.post(DATABASES_URL).mock(side_effect=httpx.ConnectError("refused"))

            with pytest.raises(GatewayError, match="refused"):
                await gateway.create_database("app-p1")


class TestScripts:
    @pytest.mark.asyncio
    async def test_deploy_references_last_seen_token(self, gateway, deployment):
        digest = content_digest(DOCUMENT.encode())

        async with respx.mock() as respx_mock:
            respx_mock.post(SESSION_URL).mock(
                return_value=httpx.Response(
                    200, json=envelope({"jwt": "session-1", "buckets": [[digest]]})
                )
            )
            respx_mock.post(UPLOAD_URL).mock(
                return_value=httpx.Response(200, json=envelope({"jwt": "completion-1"}))
            )
            deploy = respx_mock.put(SCRIPT_URL).mock(
                return_value=httpx.Response(200, json=envelope({"id": "app-p1"}))
            )

            await gateway.deploy_service(deployment)

        body = deploy.calls.last.request.read()
        assert b'"jwt": "completion-1"' in body
        assert b"session-1" not in body

    @pytest.mark.asyncio
    async def test_deploy_metadata_and_module(self, gateway, deployment):
        async with respx.mock() as respx_mock:
            respx_mock.post(SESSION_URL).mock(
                return_value=httpx.Response(200, json=envelope({"jwt": "session-1", "buckets": []}))
            )
            deploy = respx_mock.put(SCRIPT_URL).mock(
                return_value=httpx.Response(200, json=envelope({"id": "app-p1"}))
            )

            await gateway.deploy_service(deployment)

        request = deploy.calls.last.request
        body = request.read()
        assert request.headers["Authorization"] == "Bearer primary-token"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'"main_module": "app-p1.mjs"' in body
        assert b'"compatibility_date": "2024-01-01"' in body
        assert b'"jwt": "session-1"' in body
        assert b'"database_id": "db-123"' in body
        assert b'"bucket_name": "user-code"' in body
        assert b'"name": "JWT_SECRET", "text": "s3cr3t"' in body
        assert b'"type": "assets", "name": "ASSETS"' in body
        assert b'filename="app-p1.mjs"' in body
        assert b"application/javascript+module" in body
        assert deployment.script_content.encode() in body

    @pytest.mark.asyncio
    async def test_deploy_manifest_holds_only_the_document(self, gateway, deployment):
        async with respx.mock() as respx_mock:
            session = respx_mock.post(SESSION_URL).mock(
                return_value=httpx.Response(200, json=envelope({"jwt": "session-1", "buckets": []}))
            )
            respx_mock.put(SCRIPT_URL).mock(return_value=httpx.Response(200, json=envelope({})))

            await gateway.deploy_service(deployment)

        manifest = json.loads(session.calls.last.request.content)["manifest"]
        assert manifest == {
            "/index.html": {"hash": content_digest(DOCUMENT.encode()), "size": len(DOCUMENT)}
        }

    @pytest.mark.asyncio
    async def test_rejected_deploy_carries_status_and_body(self, gateway, deployment):
        async with respx.mock() as respx_mock:
            respx_mock.post(SESSION_URL).mock(
                return_value=httpx.Response(200, json=envelope({"jwt": "session-1", "buckets": []}))
            )
            respx_mock.put(SCRIPT_URL).mock(
                return_value=httpx.Response(400, text="Uncaught SyntaxError: Unexpected token")
            )

            with pytest.raises(GatewayError) as exc_info:
                await gateway.deploy_service(deployment)

        assert exc_info.value.status_code == 400
        assert "Unexpected token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_failed_asset_upload_skips_script_upload(self, gateway, deployment):
        digest = content_digest(DOCUMENT.encode())

        async with respx.mock(assert_all_called=False) as respx_mock:
            respx_mock.post(SESSION_URL).mock(
                return_value=httpx.Response(
                    200, json=envelope({"jwt": "session-1", "buckets": [[digest]]})
                )
            )
            respx_mock.post(UPLOAD_URL).mock(
                return_value=httpx.Response(
                    500, json=envelope(success=False, errors=[{"message": "storage down"}])
                )
            )
            deploy = respx_mock.put(SCRIPT_URL)

            with pytest.raises(GatewayError, match="storage down"):
                await gateway.deploy_service(deployment)

        assert not deploy.called

    @pytest.mark.asyncio
    async def test_delete_service(self, gateway):
        async with respx.mock() as respx_mock:
            route = respx_mock.delete(SCRIPT_URL).mock(
                return_value=httpx.Response(200, json=envelope(None))
            )

            await gateway.delete_service("app-p1")

        assert route.called

    @pytest.mark.asyncio
    async def test_delete_missing_service_raises(self, gateway):
        async with respx.mock() as respx_mock:
            respx_mock.delete(SCRIPT_URL).mock(
                return_value=httpx.Response(404, text="script not found")
            )

            with pytest.raises(GatewayError, match="script not found"):
                await gateway.delete_service("app-p1")
