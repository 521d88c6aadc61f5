"""Custom exceptions for the sensor sample store."""


class SampleStoreError(Exception):
    """Base exception for all sample store errors."""

    pass


class NotFound(SampleStoreError):
    """Raised when the store file or the requested sample does not exist."""

    pass


class OpenError(SampleStoreError):
    """Raised when a store handle cannot be opened."""

    pass


class OpenFailed(OpenError):
    """Raised when the engine or filesystem rejects the open or schema creation."""

    pass


class StoreNotFound(NotFound, OpenError):
    """Raised when a consumer opens a path with no existing store."""

    pass


class AppendError(SampleStoreError):
    """Raised when a sample cannot be appended."""

    pass


class ReadOnlyViolation(AppendError):
    """Raised when a mutation is attempted through a consumer handle."""

    pass


class WriteFailed(AppendError):
    """Raised when an insert could not be durably completed."""

    pass


class ReadError(SampleStoreError):
    """Raised when samples cannot be read back."""

    pass


class ReadFailed(ReadError):
    """Raised when a query fails (distinct from an empty result)."""

    pass


class EmptyStore(NotFound, ReadError):
    """Raised when the latest sample is requested from an empty store."""

    pass


class StoreClosed(SampleStoreError):
    """Raised when a handle is used after close()."""

    pass


class InvalidSetting(SampleStoreError, ValueError):
    """Raised when a configuration value cannot be parsed."""

    pass
