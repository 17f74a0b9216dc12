"""Thread-safe two-level configuration store loaded from JSON.

A configuration file is a JSON object whose members are sections, each an
object of key/value pairs:

    {
        "server": {"port": 8080, "debug": true, "name": "api"},
        "db": {"dsn": "postgres://localhost/app", "pool": 4}
    }

Usage:
    store = read_config("config.json")

    port = store.get_as_int("server", "port")      # 8080
    debug = store.get_as_string("server", "debug")  # "true"
    store.set_value("server", "timeout", timedelta(seconds=30))
"""

import copy
import json
import logging
import os
from typing import Any, Mapping, Union

from .errors import ConfigDecodeError, ConfigReadError
from .locking import ReadWriteLock
from .values import ABSENT, Kind, as_float, as_int, as_string, kind_of

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _reject_constant(name: str) -> Any:
    """NaN and Infinity are Python extensions, not JSON."""
    raise ValueError(f"invalid JSON literal {name}")


def _check_shape(data: Any) -> None:
    """Raise TypeError unless data is an object of objects."""
    if not isinstance(data, dict):
        raise TypeError(
            f"top level must be an object, got {type(data).__name__}"
        )
    for section, entries in data.items():
        if not isinstance(section, str):
            raise TypeError(f"section name must be a string, got {section!r}")
        if not isinstance(entries, dict):
            raise TypeError(
                f"section {section!r} must be an object, "
                f"got {type(entries).__name__}"
            )


class ConfigStore:
    """Section -> key -> value mapping behind a reader/writer lock.

    Lookups of a missing section or key return ``ABSENT`` rather than
    raising. The typed getters coerce on read: ``get_as_string`` never
    raises and renders unsupported values as ``""``, while ``get_as_int``
    and ``get_as_float`` raise ``ConversionError`` for values they cannot
    convert (including absent ones).
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = ReadWriteLock()

    @classmethod
    def from_file(cls, path: PathLike) -> "ConfigStore":
        """Load a store from a JSON file.

        Every JSON number is decoded as a float, integral literals included.

        Raises:
            ConfigReadError: The file could not be opened or read.
            ConfigDecodeError: The content is not JSON shaped as an object
                of objects.
        """
        path = os.fspath(path)
        try:
            with open(path, encoding="utf-8") as f:
                try:
                    data = json.load(
                        f, parse_int=float, parse_constant=_reject_constant
                    )
                    _check_shape(data)
                except (ValueError, TypeError) as e:
                    # JSONDecodeError and UnicodeDecodeError are ValueErrors
                    raise ConfigDecodeError(path, e, store=cls()) from e
        except OSError as e:
            raise ConfigReadError(path, e, store=cls()) from e

        store = cls()
        store._data = data
        logger.debug("Loaded config from %s (%d sections)", path, len(data))
        return store

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "ConfigStore":
        """Build a store from an in-memory mapping of sections.

        The mapping is deep-copied; later changes to it, or to values nested
        inside it, do not affect the store.

        Raises:
            ConfigDecodeError: data is not a mapping of mappings.
        """
        try:
            if not isinstance(data, Mapping):
                raise TypeError(
                    f"top level must be a mapping, got {type(data).__name__}"
                )
            sections = {}
            for section, entries in data.items():
                if not isinstance(entries, Mapping):
                    raise TypeError(
                        f"section {section!r} must be a mapping, "
                        f"got {type(entries).__name__}"
                    )
                sections[section] = copy.deepcopy(dict(entries))
            _check_shape(sections)
        except TypeError as e:
            raise ConfigDecodeError("<dict>", e, store=cls()) from e

        store = cls()
        store._data = sections
        return store

    def get(self, section: str, key: str) -> Any:
        """Return the raw value at section.key, or ``ABSENT``."""
        with self._lock.read_locked():
            entries = self._data.get(section)
            if entries is None:
                return ABSENT
            return entries.get(key, ABSENT)

    def kind(self, section: str, key: str) -> Kind:
        """Return the dynamic type of the value at section.key."""
        return kind_of(self.get(section, key))

    def get_as_string(self, section: str, key: str) -> str:
        return as_string(self.get(section, key))

    def get_as_float(self, section: str, key: str) -> float:
        """Return the value at section.key as a float.

        Raises:
            ValueError: A string value is not a float literal.
            ConversionError: The value is absent or not a string or float.
        """
        return as_float(self.get(section, key), section, key)

    def get_as_int(self, section: str, key: str) -> int:
        """Return the value at section.key as an int.

        Raises:
            ValueError: A string value is not a base-10 integer literal.
            ConversionError: The value is absent, null, a duration, a
                timestamp, a non-finite float or of an unsupported type.
        """
        return as_int(self.get(section, key), section, key)

    def set_value(self, section: str, key: str, value: Any) -> None:
        """Store value at section.key, creating the section if needed.

        Any object is accepted, including durations (``timedelta``) and
        timestamps (``datetime``) that JSON itself cannot express.
        """
        with self._lock.write_locked():
            entries = self._data.get(section)
            if entries is None:
                entries = {}
                self._data[section] = entries
                logger.debug("Created config section %r", section)
            entries[key] = value

    def has(self, section: str, key: str) -> bool:
        return self.get(section, key) is not ABSENT

    def sections(self) -> list[str]:
        with self._lock.read_locked():
            return sorted(self._data)

    def keys(self, section: str) -> list[str]:
        """Sorted key names of a section; empty for an unknown section."""
        with self._lock.read_locked():
            return sorted(self._data.get(section, {}))

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Deep copy of the whole mapping, taken under the read lock."""
        with self._lock.read_locked():
            return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"ConfigStore(sections={self.sections()!r})"


def read_config(path: PathLike) -> ConfigStore:
    """Load a ``ConfigStore`` from a JSON file. See ``ConfigStore.from_file``."""
    return ConfigStore.from_file(path)
