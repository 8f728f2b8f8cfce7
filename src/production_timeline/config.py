from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

import yaml

from .grid import DEFAULT_CELL_WIDTH
from .resolution import TimelineError


class SettingsError(TimelineError):
    """Raised when a settings file has unknown keys or wrongly typed values."""


@dataclass(frozen=True)
class TimelineSettings:
    cell_width: int = DEFAULT_CELL_WIDTH
    timezone: str | None = None

    def merged(self, **overrides: Any) -> "TimelineSettings":
        """Copy with every non-None override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


_EXPECTED_TYPES: dict[str, type] = {
    "cell_width": int,
    "timezone": str,
}


def load_settings(path: str) -> TimelineSettings:
    """Read a YAML settings file; an empty file yields the defaults."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    return parse_settings(raw)


def parse_settings(raw: Any) -> TimelineSettings:
    if raw is None:
        return TimelineSettings()
    if not isinstance(raw, dict):
        raise SettingsError("settings: expected mapping at top level")

    section = raw.get("timeline", raw)
    if not isinstance(section, dict):
        raise SettingsError("settings.timeline: expected mapping")

    allowed = {f.name for f in fields(TimelineSettings)}
    extras = sorted(set(section) - allowed)
    if extras:
        raise SettingsError(f"settings: unexpected fields {extras}")

    values: dict[str, Any] = {}
    for key, value in section.items():
        expected = _EXPECTED_TYPES[key]
        if value is None and key == "timezone":
            continue
        if not isinstance(value, expected) or isinstance(value, bool):
            raise SettingsError(f"settings.{key}: expected {expected.__name__}")
        values[key] = value

    if values.get("cell_width", DEFAULT_CELL_WIDTH) <= 0:
        raise SettingsError("settings.cell_width: expected positive integer")
    return TimelineSettings(**values)
