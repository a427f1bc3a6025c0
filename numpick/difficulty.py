"""Difficulty table — tier to card count, time budget and miss penalty."""

from dataclasses import dataclass, replace

TIERS = ("beginner", "intermediate", "advanced", "master")
DEFAULT_TIER = "beginner"
MIN_CARDS = 2


@dataclass(frozen=True)
class DifficultySetting:
    card_count: int
    time: int      # seconds for the whole session
    penalty: int   # seconds lost per miss


DIFFICULTY_SETTINGS: dict[str, DifficultySetting] = {
    "beginner": DifficultySetting(card_count=3, time=60, penalty=5),
    "intermediate": DifficultySetting(card_count=4, time=60, penalty=5),
    "advanced": DifficultySetting(card_count=5, time=50, penalty=8),
    "master": DifficultySetting(card_count=6, time=45, penalty=10),
}


def coerce_int(value, default: int = 0) -> int:
    """Parse loose numeric input; anything unparseable becomes default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default


class DifficultyTable:
    """Read-only lookup of DifficultySetting by tier."""

    def __init__(self, settings: dict[str, DifficultySetting] | None = None):
        self._settings = dict(settings or DIFFICULTY_SETTINGS)

    def __contains__(self, tier) -> bool:
        return tier in self._settings

    def __getitem__(self, tier: str) -> DifficultySetting:
        return self._settings[tier]

    def get(self, tier: str) -> DifficultySetting:
        return self._settings[tier]

    def tiers(self) -> list[str]:
        return list(self._settings)

    def with_overrides(self, overrides: dict | None) -> "DifficultyTable":
        """Return a new table with per-tier overrides merged in.

        Values are coerced with coerce_int; 0 or malformed means "keep the
        built-in value". Unknown tiers and fields are ignored.
        """
        merged = dict(self._settings)
        for tier, fields in (overrides or {}).items():
            if tier not in merged or not isinstance(fields, dict):
                continue
            current = merged[tier]
            changes = {}
            for name in ("card_count", "time", "penalty"):
                value = coerce_int(fields.get(name))
                if value > 0:
                    changes[name] = value
            if "card_count" in changes:
                changes["card_count"] = max(MIN_CARDS, changes["card_count"])
            merged[tier] = replace(current, **changes)
        return DifficultyTable(merged)
