from typing import Optional


class PurgeException(Exception):
    pass


class ConfigError(PurgeException):

    def __init__(self, message: str):
        super().__init__(message)


class ApiError(PurgeException):
    """Raised by the platform client when a request fails.

    Args:
        status: HTTP status code or None for transport level failures (connection, timeout)
        url: Requested URL
        message: Optional error details
    """

    def __init__(self, status: Optional[int], url: str, message: Optional[str] = None):
        self.status = status
        self.url = url
        super().__init__(f"status=[{status}] url=[{url}] {message or ''}".rstrip())


class FetchError(PurgeException):
    """Listing of a platform collection (tags, workflow runs, artifacts of a run) failed"""

    def __init__(self, resource: str, message: str, *, run_id=None):
        self.resource = resource
        self.run_id = run_id
        target = f" run=[{run_id}]" if run_id is not None else ""
        super().__init__(f"Cannot fetch {resource}{target}: {message}")


class DeletionError(PurgeException):

    def __init__(self, artifact_id, message: str):
        self.artifact_id = artifact_id
        super().__init__(f"Cannot delete artifact {artifact_id}: {message}")
