from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(eq=False)
class DraftError(Exception):
    """Structured error for draft flows.

    The server layer maps each subclass to an HTTP status while keeping a stable
    machine-readable code for client/UI. Rejections are final: callers re-read
    the board before trying again.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


@dataclass(eq=False)
class DraftAuthorizationError(DraftError):
    """Caller is not the current picker and holds no commissioner override."""


@dataclass(eq=False)
class DraftEligibilityError(DraftError):
    """Target player is restricted, outside the game pool, or already drafted."""


@dataclass(eq=False)
class DraftConflictError(DraftError):
    """A concurrent commit won the uniqueness constraint first."""


@dataclass(eq=False)
class DraftUnavailableError(DraftError):
    """Store or live feed unreachable; retryable after a refresh."""


@dataclass(eq=False)
class DraftNotFoundError(DraftError):
    """Unknown game."""


# Error codes (stable API surface)
NOT_YOUR_TURN = "NOT_YOUR_TURN"
NO_ACTIVE_PICKER = "NO_ACTIVE_PICKER"
OVERRIDE_NOT_ALLOWED = "OVERRIDE_NOT_ALLOWED"
OVERRIDE_TARGET_NOT_IN_ORDER = "OVERRIDE_TARGET_NOT_IN_ORDER"
PLAYER_NOT_IN_POOL = "PLAYER_NOT_IN_POOL"
PLAYER_RESTRICTED = "PLAYER_RESTRICTED"
PLAYER_ALREADY_DRAFTED = "PLAYER_ALREADY_DRAFTED"
NO_LEGAL_CANDIDATE = "NO_LEGAL_CANDIDATE"
PICK_CONFLICT = "PICK_CONFLICT"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
GAME_NOT_FOUND = "GAME_NOT_FOUND"
