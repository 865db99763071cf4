"""Error taxonomy shared by the CQC sync job and the HTTP layer."""


class ZeyraError(Exception):
    """Base exception for backend errors."""

    pass


class ConfigurationError(ZeyraError):
    """A required credential or setting is missing."""

    pass


class TransportError(ZeyraError):
    """Network-level failure talking to an upstream service."""

    pass


class UpstreamError(ZeyraError):
    """Upstream service answered with a non-2xx status."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"CQC API error: {status} {message}")


class StorageError(ZeyraError):
    """Upsert or query against the local store failed."""

    pass


class IdentityProviderError(ZeyraError):
    """Identity provider rejected a verification or admin call."""

    def __init__(self, status: int | None, message: str):
        self.status = status
        self.message = message
        super().__init__(message)
