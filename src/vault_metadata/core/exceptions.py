"""Errors raised while computing and checking vault metadata."""


class VaultMetadataError(Exception):
    """Base exception for vault metadata errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class VersionNotFoundError(VaultMetadataError):
    """Raised when a required dataset version, such as the draft, is absent."""

    pass


class MetadataValidationError(VaultMetadataError):
    """Raised when a required field is missing or an identifier is malformed."""

    pass


class InconsistentStateError(VaultMetadataError):
    """Raised when released versions disagree with each other or with the draft.

    Attributes:
        version: The offending version as "<major>.<minor>", if known
    """

    def __init__(self, message: str, version: str | None = None, *args, **kwargs):
        self.version = version
        super().__init__(message, *args, **kwargs)
