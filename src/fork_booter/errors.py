"""Error taxonomy shared by the booter hand-off."""

from __future__ import annotations


class BooterError(Exception):
    """Base class for every failure of the parent-to-worker hand-off."""


class EncodingError(BooterError, ValueError):
    """Raised when a configuration cannot be encoded (invalid or missing required value)."""


class TransportError(BooterError):
    """Raised when a booter file cannot be written, read or removed."""


class FormatError(BooterError):
    """Raised when persisted booter text does not follow the key=value line format."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ConfigurationCorruptError(BooterError):
    """Raised when a decoded store lacks a required key or holds an unusable value."""

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key


class MissingKeyError(ConfigurationCorruptError):
    """Raised when a required key is absent."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Required booter key is missing: {key}", key=key)


class MalformedValueError(ConfigurationCorruptError):
    """Raised when a key is present but its value cannot be read as the requested type."""

    def __init__(self, key: str, value: str, expected: str) -> None:
        super().__init__(
            f"Booter key {key} holds {value!r}, expected {expected}.",
            key=key,
        )
        self.value = value
        self.expected = expected
