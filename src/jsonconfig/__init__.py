"""jsonconfig — thread-safe two-level configuration store loaded from JSON."""

from .errors import (
    ConfigDecodeError,
    ConfigLoadError,
    ConfigReadError,
    ConversionError,
    JSONConfigError,
)
from .store import ConfigStore, read_config
from .values import ABSENT, Float32, Kind, kind_of

__version__ = "0.1.0"

__all__ = [
    "ConfigStore",
    "read_config",
    "ABSENT",
    "Float32",
    "Kind",
    "kind_of",
    "JSONConfigError",
    "ConfigLoadError",
    "ConfigReadError",
    "ConfigDecodeError",
    "ConversionError",
]
