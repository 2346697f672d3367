"""Exceptions for deferbars.

Exception Hierarchy:
DeferbarsError (base)
├── ConfigurationError        # Invalid wrap() options (also a ValueError)
└── LedgerError               # Render-pass protocol violation (implementation defect)
    ├── LedgerClosedError     # Registration into a settled ledger
    └── NoActiveLedgerError   # Registration with no render pass running

Helper failures are never wrapped: an exception raised by a helper (or by
the awaitable it returned) propagates unchanged from the awaited template,
so callers see exactly the error their helper produced.

Example:
    ```
    D-LED-001: Cannot register a pending value: ledger #3 is already closed
      Hint: The render pass ended before this value was produced; ...
    ```

"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Searchable error codes for deferbars errors.

    Format: D-{CATEGORY}-{NUMBER}
    Categories: CFG (configuration), LED (ledger protocol)
    """

    # Configuration errors (D-CFG-xxx)
    INVALID_PLACEHOLDER = "D-CFG-001"
    INVALID_BACKEND = "D-CFG-002"
    INVALID_PARTIAL = "D-CFG-003"
    INVALID_HELPER = "D-CFG-004"

    # Ledger protocol errors (D-LED-xxx)
    LEDGER_CLOSED = "D-LED-001"
    NO_ACTIVE_LEDGER = "D-LED-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'configuration', 'ledger')."""
        prefix = self.value.split("-")[1]
        return {
            "CFG": "configuration",
            "LED": "ledger",
        }.get(prefix, "unknown")


class DeferbarsError(Exception):
    """Base exception for all deferbars errors.

    Attributes:
        message: Error description
        suggestion: Actionable fix suggestion
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def __init__(self, message: str, *, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def format_compact(self) -> str:
        """Format error as a structured, human-readable summary.

        Format::

            D-LED-002: Cannot register a pending value outside a render pass
              Hint: Call helpers through a compiled template

        Returns:
            Multi-line string with error code, message and hint.
        """
        header = self.message
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        parts = [header]
        if self.suggestion:
            parts.append(f"  Hint: {self.suggestion}")
        return "\n".join(parts)


class ConfigurationError(DeferbarsError, ValueError):
    """Invalid option passed to ``wrap()`` or a registration call."""

    code: ErrorCode | None = ErrorCode.INVALID_PLACEHOLDER

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
    ):
        if code is not None:
            self.code = code
        super().__init__(message, suggestion=suggestion)


class LedgerError(DeferbarsError):
    """Render-pass protocol violation.

    Never a recoverable runtime condition: reaching one of these means a
    value was registered somewhere the call-site guard should have routed
    to a fresh render pass.
    """


class LedgerClosedError(LedgerError):
    """A value was registered into a ledger whose synchronous phase ended."""

    code: ErrorCode | None = ErrorCode.LEDGER_CLOSED

    def __init__(self, ledger_id: int):
        self.ledger_id = ledger_id
        super().__init__(
            f"Cannot register a pending value: ledger #{ledger_id} is already closed",
            suggestion=(
                "The render pass ended before this value was produced; "
                "invoke block content through options['fn'] so it opens its own pass"
            ),
        )


class NoActiveLedgerError(LedgerError):
    """A value was registered while no render pass was running."""

    code: ErrorCode | None = ErrorCode.NO_ACTIVE_LEDGER

    def __init__(self) -> None:
        super().__init__(
            "Cannot register a pending value outside a render pass",
            suggestion="Call helpers through a compiled template",
        )
