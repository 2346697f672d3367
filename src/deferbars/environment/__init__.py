"""Environment subsystem for deferbars.

Provides the wrapped engine (``AsyncHandlebars``), its configuration,
the helper/partial registries and the exception hierarchy.

Public API:
    AsyncHandlebars: pybars environment whose templates render asynchronously
    WrapOptions: Configuration dataclass
    wrap: Build an AsyncHandlebars from a pybars compiler
    CallableRegistry: Dict-like helper/partial table

Exceptions:
    DeferbarsError: Base class
    ConfigurationError: Invalid option
    LedgerError, LedgerClosedError, NoActiveLedgerError: Protocol violations

"""

from deferbars.environment.exceptions import (
    ConfigurationError,
    DeferbarsError,
    ErrorCode,
    LedgerClosedError,
    LedgerError,
    NoActiveLedgerError,
)
from deferbars.environment.core import AsyncHandlebars, WrapOptions, wrap
from deferbars.environment.registry import CallableRegistry

__all__ = [
    "AsyncHandlebars",
    "CallableRegistry",
    "ConfigurationError",
    "DeferbarsError",
    "ErrorCode",
    "LedgerClosedError",
    "LedgerError",
    "NoActiveLedgerError",
    "WrapOptions",
    "wrap",
]
