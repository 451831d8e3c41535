from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Theme:
    id: int
    name: str
    primary: str
    secondary: str
    accent: str
    emoji: str
    background: str


THEMES: dict[int, Theme] = {
    1: Theme(
        id=1,
        name="Classic Red",
        primary="#E60012",
        secondary="#FFB3D9",
        accent="#FF6B9D",
        emoji="❤️",
        background="/static/backgrounds/bg1.jpg",
    ),
    2: Theme(
        id=2,
        name="Soft Pink",
        primary="#FFB3D9",
        secondary="#FFC0E5",
        accent="#FF85C0",
        emoji="🌸",
        background="/static/backgrounds/bg2.jpg",
    ),
    3: Theme(
        id=3,
        name="Cyber Lavender",
        primary="#B19CD9",
        secondary="#D4C5F9",
        accent="#9D7FDB",
        emoji="💜",
        background="/static/backgrounds/bg3.jpg",
    ),
}

DEFAULT_THEME_ID = 1


def is_known_theme(theme_id: Any) -> bool:
    return _coerce(theme_id) in THEMES


def resolve_theme(theme_id: Any) -> Theme:
    """Look up a theme; anything unrecognised falls back to theme 1."""
    return THEMES.get(_coerce(theme_id), THEMES[DEFAULT_THEME_ID])


def _coerce(theme_id: Any) -> int | None:
    if isinstance(theme_id, bool):
        return None
    try:
        return int(theme_id)
    except (TypeError, ValueError):
        return None
