class InvalidScanRequestError(ValueError):
    """Caller input rejected before any filesystem work (bad date, empty keyword, unknown status)."""


class LogRootUnavailableError(RuntimeError):
    """The configured log root cannot be listed. Nothing can be scanned."""
