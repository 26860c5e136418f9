# schema.py
"""Canonical identifiers and enums shared by the store and the draft engine.

- profile_id / player_id / game_id are opaque non-empty strings (uuid-like).
- Normalization only trims whitespace; ids are case-sensitive.
"""

from __future__ import annotations

from typing import Any, Iterable

SCHEMA_VERSION = "1.2"

PLAYER_TYPES = ("kid", "coach")
GAME_STATUSES = ("scheduled", "drafting", "live", "completed")

# Provenance of a draft_picks row.
PICK_SOURCE_USER = "draft_user"
PICK_SOURCE_AUTO = "auto"
PICK_SOURCE_OVERRIDE = "commissioner_override"
PICK_SOURCES = (PICK_SOURCE_USER, PICK_SOURCE_AUTO, PICK_SOURCE_OVERRIDE)


def _normalize_id(value: Any, *, what: str) -> str:
    if value is None:
        raise ValueError(f"{what} is required")
    s = str(value).strip()
    if not s or s.lower() in {"none", "nan", "null"}:
        raise ValueError(f"invalid {what}: {value!r}")
    return s


def normalize_player_id(value: Any) -> str:
    return _normalize_id(value, what="player_id")


def normalize_profile_id(value: Any) -> str:
    return _normalize_id(value, what="profile_id")


def normalize_game_id(value: Any) -> str:
    return _normalize_id(value, what="game_id")


def normalize_player_type(value: Any) -> str:
    s = str(value or "").strip().lower()
    if s not in PLAYER_TYPES:
        raise ValueError(f"invalid player type: {value!r} (expected one of {PLAYER_TYPES})")
    return s


def normalize_game_status(value: Any) -> str:
    s = str(value or "").strip().lower()
    if s not in GAME_STATUSES:
        raise ValueError(f"invalid game status: {value!r} (expected one of {GAME_STATUSES})")
    return s


def assert_unique_ids(ids: Iterable[str], *, what: str) -> None:
    seen: set[str] = set()
    dup: set[str] = set()
    for i in ids:
        if i in seen:
            dup.add(i)
        seen.add(i)
    if dup:
        raise ValueError(f"duplicate {what}: {sorted(dup)}")
