"""Presentation options — carried for the front-end, read by nobody else.

The engine only reads `language`. Volumes, mutes, shake/flash and the
simulated display size belong to the front-end and the audio manager.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, fields

from numpick.difficulty import coerce_int

VOLUME_MAX = 5
LANGUAGES = ("ja", "en")


@dataclass
class GameOptions:
    bgm_volume: int = 3
    sfx_volume: int = 3
    bgm_muted: bool = True
    sfx_muted: bool = True
    enable_shake: bool = True
    enable_flash: bool = True
    language: str = "ja"
    sim_width: int = 0
    sim_height: int = 0
    on_change: Callable | None = field(default=None, repr=False, compare=False)

    def _changed(self):
        if self.on_change:
            self.on_change(self)

    def set_bgm_volume(self, volume) -> None:
        self.bgm_volume = max(0, min(VOLUME_MAX, coerce_int(volume)))
        self._changed()

    def set_sfx_volume(self, volume) -> None:
        self.sfx_volume = max(0, min(VOLUME_MAX, coerce_int(volume)))
        self._changed()

    def toggle_bgm_mute(self) -> None:
        self.bgm_muted = not self.bgm_muted
        self._changed()

    def toggle_sfx_mute(self) -> None:
        self.sfx_muted = not self.sfx_muted
        self._changed()

    def set_enable_shake(self, enable: bool) -> None:
        self.enable_shake = bool(enable)
        self._changed()

    def set_enable_flash(self, enable: bool) -> None:
        self.enable_flash = bool(enable)
        self._changed()

    def set_language(self, language: str) -> None:
        if language not in LANGUAGES:
            return
        self.language = language
        self._changed()

    def toggle_language(self) -> None:
        self.set_language("en" if self.language == "ja" else "ja")

    def set_sim_resolution(self, width, height) -> None:
        """0 means "use the full display"; junk input is treated as 0."""
        self.sim_width = max(0, coerce_int(width))
        self.sim_height = max(0, coerce_int(height))
        self._changed()

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)
                if f.name != "on_change"}


def options_from_dict(raw: dict | None) -> GameOptions:
    """Build options from a config mapping, coercing every field."""
    opts = GameOptions()
    raw = raw or {}
    if "bgm_volume" in raw:
        opts.bgm_volume = max(0, min(VOLUME_MAX, coerce_int(raw["bgm_volume"])))
    if "sfx_volume" in raw:
        opts.sfx_volume = max(0, min(VOLUME_MAX, coerce_int(raw["sfx_volume"])))
    for name in ("bgm_muted", "sfx_muted", "enable_shake", "enable_flash"):
        if name in raw:
            setattr(opts, name, bool(raw[name]))
    if raw.get("language") in LANGUAGES:
        opts.language = raw["language"]
    opts.sim_width = max(0, coerce_int(raw.get("sim_width")))
    opts.sim_height = max(0, coerce_int(raw.get("sim_height")))
    return opts
