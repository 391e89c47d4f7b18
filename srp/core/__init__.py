"""Core types: configuration, results and exit codes."""

from .config import Config, ConfigError, load_config, validate_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "validate_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
