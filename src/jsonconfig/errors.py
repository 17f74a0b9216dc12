"""Exceptions raised by jsonconfig."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .store import ConfigStore


class JSONConfigError(Exception):
    """Base class for every error raised by this package."""


class ConfigLoadError(JSONConfigError):
    """Loading a configuration file failed.

    Attributes:
        path: The path that was being loaded.
        store: An empty store that is still safe to query. Lookups on it
            behave as if the file held no sections.
    """

    context = "load config"

    def __init__(self, path: str, cause: BaseException,
                 store: Optional["ConfigStore"] = None):
        super().__init__(f"{self.context}: {cause}")
        self.path = path
        self.store = store


class ConfigReadError(ConfigLoadError):
    """The configuration file could not be opened or read."""

    context = "read file"


class ConfigDecodeError(ConfigLoadError):
    """The content is not JSON shaped as an object of objects."""

    context = "decode json"


class ConversionError(JSONConfigError, TypeError):
    """A stored value has a type the requested getter cannot convert.

    Attributes:
        section: Section of the offending value.
        key: Key of the offending value.
        target: Name of the requested type ("int", "float64").
    """

    def __init__(self, target: str, section: str, key: str,
                 detail: Optional[str] = None):
        message = f"convert to {target} in: {section}.{key}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.target = target
        self.section = section
        self.key = key
