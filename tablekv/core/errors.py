from typing import Any


class StoreError(Exception):
    """Base class for every error raised by the key–value layer."""


class NotFound(StoreError):
    def __init__(self, message: str = "item not found", key: Any = None) -> None:
        if key is not None:
            message = f"{message} (key={key!r})"
        super().__init__(message)
        self.key = key


class PartialNotFound(NotFound):
    """
    Raised by a batch read when some of the requested keys are absent.
    `missing_keys` lists them in request order.
    """

    def __init__(self, missing_keys: list[Any]) -> None:
        super().__init__(f"some items not found ({len(missing_keys)} missing)")
        self.missing_keys = missing_keys


class AlreadyExists(StoreError):
    def __init__(self, key: Any) -> None:
        super().__init__(f"item already exists (key={key!r})")
        self.key = key


class InvalidArgument(StoreError, ValueError):
    pass


class InvalidResult(StoreError):
    pass


class CodecError(StoreError):
    pass


class ConstraintViolation(StoreError):
    """
    Raised by a Connection when a statement breaks a table constraint,
    typically the uniqueness of the `key` column.
    """


class ConfigurationError(StoreError):
    pass
