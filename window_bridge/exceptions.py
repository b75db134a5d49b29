"""Window Bridge — Exception hierarchy.

All exceptions raised inside the package inherit from WindowBridgeError so
that the executor boundary can collapse the whole family into a single
``False`` with one except clause.

Hierarchy:
    WindowBridgeError
    ├── IdentityError
    │   └── MalformedIdentityError
    ├── WindowNotFoundError
    ├── BridgeError
    │   ├── BridgeUnavailableError
    │   └── BridgeScriptError
    ├── ActionError
    │   ├── InvalidActionError
    │   ├── UnknownActionError
    │   └── UnknownArrangementError
    └── ConfigError
"""

from __future__ import annotations

from typing import Any


class WindowBridgeError(Exception):
    """Base exception for all Window Bridge errors."""

    # Short, stable name used in diagnostic logs (``error_kind=...``).
    kind: str = "internal"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class IdentityError(WindowBridgeError):
    """Base for composite window identity errors."""

    kind = "identity"


class MalformedIdentityError(IdentityError):
    """The window id cannot be split into a non-empty app name and title."""

    kind = "malformed_identity"

    def __init__(self, window_id: str, reason: str = "has no app/title separator") -> None:
        super().__init__(
            f"Window id '{window_id}' {reason}",
            context={"window_id": window_id},
        )
        self.window_id = window_id


# ---------------------------------------------------------------------------
# Window resolution
# ---------------------------------------------------------------------------


class WindowNotFoundError(WindowBridgeError):
    """The decoded target matches no window currently owned by the app."""

    kind = "window_not_found"

    def __init__(self, app_name: str, title: str) -> None:
        super().__init__(
            f"No window titled '{title}' found for app '{app_name}'",
            context={"app_name": app_name, "title": title},
        )
        self.app_name = app_name
        self.title = title


# ---------------------------------------------------------------------------
# Bridge layer
# ---------------------------------------------------------------------------


class BridgeError(WindowBridgeError):
    """Base for accessibility bridge errors."""

    kind = "bridge"


class BridgeUnavailableError(BridgeError):
    """The automation call could not run (missing binary, timeout, permission)."""

    kind = "bridge_unavailable"

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Bridge operation '{operation}' unavailable: {reason}",
            context={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class BridgeScriptError(BridgeError):
    """The automation script ran but reported an error or unreadable output."""

    kind = "bridge_script"

    def __init__(self, operation: str, stderr: str, return_code: int | None = None) -> None:
        super().__init__(
            f"Bridge operation '{operation}' failed: {stderr.strip() or 'no output'}",
            context={"operation": operation, "stderr": stderr, "return_code": return_code},
        )
        self.operation = operation
        self.stderr = stderr
        self.return_code = return_code


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class ActionError(WindowBridgeError):
    """Base for action input errors."""

    kind = "action"


class InvalidActionError(ActionError):
    """The action payload failed validation."""

    kind = "invalid_action"

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message, context={"validation_errors": errors or []})
        self.errors = errors or []


class UnknownActionError(ActionError):
    """The action type is outside the closed action set."""

    kind = "unknown_action"

    def __init__(self, action_type: str) -> None:
        super().__init__(
            f"Unknown action type '{action_type}'",
            context={"action_type": action_type},
        )
        self.action_type = action_type


class UnknownArrangementError(ActionError):
    """The arrangement name is outside the fixed arrangement set."""

    kind = "unknown_arrangement"

    def __init__(self, arrangement: str) -> None:
        super().__init__(
            f"Unknown arrangement '{arrangement}'",
            context={"arrangement": arrangement},
        )
        self.arrangement = arrangement


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(WindowBridgeError):
    """A configuration file could not be read or parsed."""

    kind = "config"
