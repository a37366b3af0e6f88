from typing import Optional


class ResourceManagerError(RuntimeError):
    """The resource manager could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
