"""Error taxonomy for catalog operations."""


class CatalogError(Exception):
    """Base class for catalog failures."""


class InvalidArgumentError(CatalogError, ValueError):
    """Malformed or missing input. Never retried."""


class NotFoundError(CatalogError, LookupError):
    """A name, path or request id does not resolve."""


class SourceNotFoundError(NotFoundError):
    """The source backend has no file at the requested path."""
    
    def __init__(self, path: str):
        super().__init__(f"File not found: {path}")
        self.path = path


class NetworkError(CatalogError):
    """Transient fetch failure."""


class OperationCancelledError(CatalogError):
    """The operation observed an explicit cancel."""
    
    def __init__(self, reason: str = "Request cancelled"):
        super().__init__(reason)
        self.reason = reason
