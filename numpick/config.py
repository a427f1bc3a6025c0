"""Config loader — YAML to dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from numpick.difficulty import DEFAULT_TIER, DifficultyTable, coerce_int
from numpick.options import GameOptions, options_from_dict


@dataclass
class DeckConfig:
    brightness: int = 60
    tick_interval: float = 1.0
    countdown: int = 3
    font_path: str | None = None
    ja_font_path: str | None = None


@dataclass
class GameConfig:
    difficulty: str = DEFAULT_TIER


@dataclass
class AudioConfig:
    player: str = "afplay"
    assets_dir: str | None = None


@dataclass
class AppConfig:
    deck: DeckConfig = field(default_factory=DeckConfig)
    game: GameConfig = field(default_factory=GameConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    options: GameOptions = field(default_factory=GameOptions)
    difficulty: DifficultyTable = field(default_factory=DifficultyTable)


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name)
    return value if isinstance(value, dict) else {}


def _known(cls, raw: dict) -> dict:
    names = cls.__dataclass_fields__
    return {k: v for k, v in raw.items() if k in names}


def load_config(path: Path) -> AppConfig:
    """Load config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raw = {}

    deck = DeckConfig(**_known(DeckConfig, _section(raw, "deck")))
    deck.brightness = max(0, min(100, coerce_int(deck.brightness, 60)))
    deck.countdown = max(0, coerce_int(deck.countdown, 3))
    try:
        deck.tick_interval = float(deck.tick_interval)
    except (TypeError, ValueError):
        deck.tick_interval = 1.0
    if not deck.tick_interval > 0:
        deck.tick_interval = 1.0

    game = GameConfig(**_known(GameConfig, _section(raw, "game")))
    audio = AudioConfig(**_known(AudioConfig, _section(raw, "audio")))
    options = options_from_dict(_section(raw, "options"))
    table = DifficultyTable().with_overrides(_section(raw, "difficulty"))
    if not isinstance(game.difficulty, str) or game.difficulty not in table:
        game.difficulty = DEFAULT_TIER

    return AppConfig(deck=deck, game=game, audio=audio,
                     options=options, difficulty=table)
