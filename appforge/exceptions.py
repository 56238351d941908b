"""Error taxonomy for the build and deploy pipeline."""


class AppForgeError(Exception):
    """Base class for all pipeline errors."""

    pass


class ConfigurationError(AppForgeError):
    """Required credentials or settings are missing. The pipeline never starts."""

    pass


class GenerationError(AppForgeError):
    """The generation capability returned output that cannot be used."""

    def __init__(self, message: str, raw_output: str | None = None):
        super().__init__(message)
        self.raw_output = raw_output[:500] if raw_output else raw_output


class GatewayError(AppForgeError):
    """A control-plane call failed.

    The message carries the raw diagnostic returned by the control plane so
    operators can see exactly what was rejected.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        full = message
        if status_code is not None:
            full = f"{full} (HTTP {status_code})"
        if detail:
            full = f"{full}: {detail}"
        super().__init__(full)
        self.status_code = status_code
        self.detail = detail


class BuildError(AppForgeError):
    """A build run failed. `stage` names the step that aborted the run."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage


class TeardownError(AppForgeError):
    """Stored artifacts for a project could not be removed."""

    pass


class ProjectNotFoundError(AppForgeError):
    pass


class ProjectBusyError(AppForgeError):
    """A build is already running for this project."""

    pass


class InvalidTransitionError(AppForgeError):
    """Requested status change is not allowed from the current status."""

    pass
