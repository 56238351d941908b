"""Teardown of a project's deployed resources."""

from ..clients import PlatformGateway
from ..exceptions import GatewayError, TeardownError
from ..logging_config import bind_project, get_logger
from ..schemas import TeardownReport
from ..storage import ArtifactStore, project_prefix

logger = get_logger(__name__)


class TeardownCoordinator:
    """Best-effort inverse of a build.

    Script and database deletion failures become warnings on the returned
    report so one missing resource never blocks cleanup of the others.
    Artifact cleanup failures are hard failures.
    """

    def __init__(self, gateway: PlatformGateway, artifacts: ArtifactStore):
        self.gateway = gateway
        self.artifacts = artifacts

    async def teardown(
        self,
        project_id: str,
        script_name: str | None = None,
        database_id: str | None = None,
    ) -> TeardownReport:
        """Delete the script, then the database, then stored artifacts.

        Raises:
            TeardownError: If artifacts cannot be listed, or any of them could
                not be deleted (every deletion is attempted first).
        """
        report = TeardownReport()
        with bind_project(project_id):
            if script_name:
                try:
                    await self.gateway.delete_service(script_name)
                except GatewayError as e:
                    logger.warning(
                        "teardown_service_delete_failed", script_name=script_name, error=str(e)
                    )
                    report.warnings.append(f"Delete service {script_name}: {e}")

            if database_id:
                try:
                    await self.gateway.delete_database(database_id)
                except GatewayError as e:
                    logger.warning(
                        "teardown_database_delete_failed", database_id=database_id, error=str(e)
                    )
                    report.warnings.append(f"Delete database {database_id}: {e}")

            await self._delete_artifacts(project_id, report)

            logger.info(
                "teardown_completed",
                warnings=len(report.warnings),
                deleted_artifacts=len(report.deleted_artifacts),
            )
        return report

    async def _delete_artifacts(self, project_id: str, report: TeardownReport) -> None:
        prefix = project_prefix(project_id)
        try:
            keys = await self.artifacts.list(prefix)
        except Exception as e:
            logger.error("teardown_artifact_list_failed", prefix=prefix, error=str(e))
            raise TeardownError(f"Could not list artifacts under {prefix}: {e}") from e

        failed: list[str] = []
        for key in keys:
            try:
                await self.artifacts.delete(key)
            except Exception as e:
                logger.error("teardown_artifact_delete_failed", key=key, error=str(e))
                failed.append(key)
            else:
                report.deleted_artifacts.append(key)

        if failed:
            raise TeardownError(f"Could not delete artifacts: {', '.join(failed)}")
