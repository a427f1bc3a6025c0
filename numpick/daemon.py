"""NumPick — Stream Deck front-end for the condition-pick reaction game.

Layout (8x4 = 32 keys):
  Row 1 (0-7):   HUD — title, score, time, hits, misses, tier, pause, exit
  Row 2 (8-15):  condition banner
  Row 3 (16-23): number cards, centered
  Row 4 (24-31): tier select (24-27), language, sfx, bgm, start/retry/quit

Usage:
    uv run numpick --config config.yaml
"""

import argparse
import sys
import threading
from pathlib import Path

from StreamDeck.DeviceManager import DeviceManager
from StreamDeck.ImageHelpers import PILHelper

from numpick.audio import AudioManager
from numpick.clock import CountdownThread, SessionClock
from numpick.config import AppConfig, load_config
from numpick.difficulty import TIERS
from numpick.renderer import (
    render_banner, render_card, render_countdown, render_empty,
    render_hud_value, render_text_button, render_tier, render_timer,
    set_font_paths, status_to_color,
)
from numpick.session import GameSession

KEY_COUNT = 32
HUD_TITLE, HUD_SCORE, HUD_TIME, HUD_HITS, HUD_MISSES, HUD_TIER = 0, 1, 2, 3, 4, 5
PAUSE_KEY = 6
EXIT_KEY = 7
BANNER_KEYS = list(range(8, 16))
CARD_ROW = list(range(16, 24))
TIER_KEYS = dict(zip(range(24, 28), TIERS))
LANG_KEY = 28
SFX_KEY = 29
BGM_KEY = 30
START_KEY = 31

FLASH_SECONDS = 0.25
SHAKE_SECONDS = 0.15
LOW_TIME = 5

UI_TEXT = {
    "ja": {
        "press_start": "スタートを押せ",
        "paused": "一時停止中",
        "time_up": "タイムアップ！",
    },
    "en": {
        "press_start": "PRESS START",
        "paused": "PAUSED",
        "time_up": "TIME UP!",
    },
}

BUTTON_TEXT = {
    "ja": {"start": "スタート", "retry": "リトライ", "quit": "やめる"},
    "en": {"start": "START", "retry": "RETRY", "quit": "QUIT"},
}


def find_deck():
    """Find first visual Stream Deck device."""
    decks = DeviceManager().enumerate()
    for deck in decks:
        if deck.is_visual():
            return deck
    return None


def card_keys(count: int) -> list[int]:
    """Center `count` cards on the card row."""
    start = CARD_ROW[0] + (len(CARD_ROW) - count) // 2
    return list(range(start, start + count))


class NumPickDeck:
    """Binds a GameSession to a deck: keys in, images and sounds out.

    Every session command runs under `lock`, so key presses, clock ticks and
    countdown completion never interleave.
    """

    def __init__(self, config: AppConfig, deck, audio: AudioManager | None = None,
                 session: GameSession | None = None, verbose: bool = False):
        self.config = config
        self.deck = deck
        self.audio = audio
        self.verbose = verbose
        self.lock = threading.RLock()
        self.exit_event = threading.Event()

        self.options = config.options
        self.options.on_change = self._on_options_change
        self.session = session or GameSession(
            difficulty=config.game.difficulty,
            table=config.difficulty,
            options=self.options,
        )
        self.session.on_event = self._on_event
        self.clock = SessionClock(self._on_tick, config.deck.tick_interval, self.lock)
        self.countdown: CountdownThread | None = None
        self.card_map: dict[int, int] = {}  # key -> card value
        self._base_brightness = config.deck.brightness

    # ── lifecycle ─────────────────────────────────────────────────

    def start(self):
        """Initialize deck and show the title screen."""
        self.deck.open()
        self.deck.reset()
        self.deck.set_brightness(self._base_brightness)
        if self.audio:
            self.audio.apply_options(self.options)
            self.audio.play_bgm("title")
        self.render_all()
        self.deck.set_key_callback(self._on_key_change)

    def stop(self):
        """Shutdown cleanly."""
        with self.lock:
            self._cancel_countdown()
            self.clock.stop()
        self.deck.reset()
        self.deck.close()

    def set_key(self, pos: int, img):
        native = PILHelper.to_native_key_format(self.deck, img)
        with self.deck:
            self.deck.set_key_image(pos, native)

    # ── rendering ─────────────────────────────────────────────────

    @property
    def language(self) -> str:
        return self.options.language

    def render_all(self):
        self.render_hud()
        self.render_banner()
        self.render_cards()
        self.render_controls()

    def render_hud(self):
        s = self.session
        self.set_key(HUD_TITLE, render_text_button(
            lines=["NUM", "PICK"], font_sizes=[16, 18],
            colors=["#f59e0b", "#fbbf24"]))
        self.set_key(HUD_SCORE, render_hud_value("SCORE", str(s.score)))
        self.set_key(HUD_TIME, render_timer(s.time_left, s.setting.time))
        self.set_key(HUD_HITS, render_hud_value("HIT", str(s.correct_count), "#4ade80"))
        self.set_key(HUD_MISSES, render_hud_value("MISS", str(s.miss_count), "#f87171"))
        self.set_key(HUD_TIER, render_hud_value(
            "TIER", s.difficulty[:6].upper(), status_to_color(s.difficulty)))
        if s.phase == "playing":
            pause = render_text_button(lines=["II"], bg_color="#374151")
        elif s.phase == "paused":
            pause = render_text_button(lines=[">"], bg_color="#065f46")
        else:
            pause = render_empty()
        self.set_key(PAUSE_KEY, pause)
        self.set_key(EXIT_KEY, render_text_button(lines=["EXIT"], font_sizes=[14],
                                                  bg_color="#7c2d12"))

    def render_banner(self, text: str | None = None, color: str = "#fbbf24"):
        s = self.session
        if text is None:
            ui = UI_TEXT[self.language]
            if s.phase == "idle":
                text = ui["press_start"]
            elif s.phase == "ended":
                text = f"{ui['time_up']}  {s.score}"
            elif s.phase == "paused":
                text = ui["paused"]
            else:
                text = s.condition.describe(self.language)
        tiles = render_banner(text, len(BANNER_KEYS), self.language, fg=color)
        for key, tile in zip(BANNER_KEYS, tiles):
            self.set_key(key, tile)

    def render_cards(self):
        s = self.session
        self.card_map = {}
        shown = s.phase in ("playing", "ended")
        keys = card_keys(len(s.numbers)) if shown else []
        for key in CARD_ROW:
            if key in keys:
                value = s.numbers[keys.index(key)]
                if s.phase == "playing":
                    self.card_map[key] = value
                self.set_key(key, render_card(value))
            else:
                self.set_key(key, render_empty())

    def render_controls(self):
        s = self.session
        between = s.phase in ("idle", "ended")
        for key, tier in TIER_KEYS.items():
            if between:
                self.set_key(key, render_tier(tier, tier == s.difficulty))
            else:
                self.set_key(key, render_empty())
        self.set_key(LANG_KEY, render_hud_value("LANG", self.language.upper(), "#60a5fa"))
        self.set_key(SFX_KEY, render_hud_value(
            "SFX", "OFF" if self.options.sfx_muted else "ON", "#9ca3af"))
        self.set_key(BGM_KEY, render_hud_value(
            "BGM", "OFF" if self.options.bgm_muted else "ON", "#9ca3af"))
        labels = BUTTON_TEXT[self.language]
        if s.phase == "idle":
            self.set_key(START_KEY, render_text_button(lines=[labels["start"]],
                                                       font_sizes=[16], bg_color="#065f46",
                                                       language=self.language))
        elif s.phase == "ended":
            self.set_key(START_KEY, render_text_button(lines=[labels["retry"]],
                                                       font_sizes=[16], bg_color="#065f46",
                                                       language=self.language))
        else:
            self.set_key(START_KEY, render_text_button(lines=[labels["quit"]],
                                                       font_sizes=[16], bg_color="#7c2d12",
                                                       language=self.language))

    # ── engine reactions ──────────────────────────────────────────

    def _play_sfx(self, name: str):
        if self.audio:
            self.audio.play_sfx(name)

    def _play_bgm(self, name: str):
        if self.audio:
            self.audio.play_bgm(name)

    def _on_event(self, name: str, snapshot):
        """Session events -> sounds and clock; rendering is done by the caller."""
        if self.verbose and name != "round":
            print(f"[{name}] score={snapshot.score} time={snapshot.time_left} "
                  f"hits={snapshot.correct_count} misses={snapshot.miss_count}")
        if name == "start":
            self._play_bgm("game")
        elif name == "correct":
            self._play_sfx("correct")
        elif name == "miss":
            self._play_sfx("wrong")
        elif name == "end":
            self._play_bgm("result")
        elif name == "reset":
            self._play_bgm("title")
        self.clock.sync(snapshot.playing)

    def _on_options_change(self, options):
        if self.audio:
            self.audio.apply_options(options)

    def _on_tick(self):
        with self.lock:
            self.session.tick()
            s = self.session
            self.set_key(HUD_TIME, render_timer(s.time_left, s.setting.time))
            if s.playing and 0 < s.time_left <= LOW_TIME:
                self._play_sfx("tick")
            if s.phase == "ended":
                self.render_all()

    # ── countdown ─────────────────────────────────────────────────

    def begin_countdown(self):
        """3, 2, 1, START, then the session starts."""
        if self.countdown is not None or self.session.phase not in ("idle", "ended"):
            return
        self.countdown = CountdownThread(
            on_step=self._on_countdown_step,
            on_done=self._on_countdown_done,
            count=self.config.deck.countdown,
            interval=self.config.deck.tick_interval,
        )
        self.countdown.start()

    def _on_countdown_step(self, n: int):
        with self.lock:
            self._stop_bgm()
            self._play_sfx("countdown" if n > 0 else "start")
            img = render_countdown(n)
            for key in BANNER_KEYS:
                self.set_key(key, render_empty(bg="#1e293b"))
            self.set_key(BANNER_KEYS[len(BANNER_KEYS) // 2], img)

    def _stop_bgm(self):
        if self.audio:
            self.audio.stop_bgm()

    def _on_countdown_done(self):
        with self.lock:
            self.countdown = None
            if self.session.start():
                self.render_all()

    def _cancel_countdown(self):
        if self.countdown is not None:
            self.countdown.cancel()
            self.countdown = None

    # ── input ─────────────────────────────────────────────────────

    def _flash_then_redraw(self, key: int, value: int, correct: bool):
        self.set_key(key, render_card(value, "correct" if correct else "wrong"))

        def _redraw():
            with self.lock:
                if self.session.phase == "playing":
                    self.render_cards()

        timer = threading.Timer(FLASH_SECONDS, _redraw)
        timer.daemon = True
        timer.start()

    def _shake(self):
        """Brightness dip on a miss; the deck cannot move."""
        self.deck.set_brightness(max(5, self._base_brightness // 3))
        timer = threading.Timer(SHAKE_SECONDS,
                                lambda: self.deck.set_brightness(self._base_brightness))
        timer.daemon = True
        timer.start()

    def press_card(self, key: int):
        value = self.card_map.get(key)
        if value is None:
            return
        verdict = self.session.submit_answer(value)
        if verdict is None:
            return
        self.render_hud()
        self.render_banner()
        if self.options.enable_flash:
            # other cards change now, the pressed one shows the verdict first
            # and stays unmapped until it is redrawn
            self.render_cards()
            self.card_map.pop(key, None)
            self._flash_then_redraw(key, value, verdict)
        else:
            self.render_cards()
        if not verdict and self.options.enable_shake:
            self._shake()

    def toggle_pause(self):
        s = self.session
        if s.phase == "playing":
            s.pause()
        elif s.phase == "paused":
            s.resume()
        else:
            return
        self.render_all()

    def press_start(self):
        s = self.session
        if s.phase in ("idle", "ended"):
            self.begin_countdown()
        else:
            s.reset()
            self.render_all()

    def _on_key_change(self, deck, key: int, pressed: bool):
        """Handle physical button press."""
        if not pressed:
            return
        if self.verbose:
            print(f"Button {key} pressed")

        if key == EXIT_KEY:
            self.exit_event.set()
            return

        with self.lock:
            if key in self.card_map:
                self.press_card(key)
            elif key == PAUSE_KEY:
                self.toggle_pause()
            elif key == START_KEY:
                if self.countdown is not None:
                    return
                self.press_start()
            elif key in TIER_KEYS:
                if self.countdown is None and self.session.set_difficulty(TIER_KEYS[key]):
                    self.render_all()
            elif key == LANG_KEY:
                self.options.toggle_language()
                self.render_hud()
                if self.countdown is None:
                    self.render_banner()
                self.render_cards()
                self.render_controls()
            elif key == SFX_KEY:
                self.options.toggle_sfx_mute()
                self.render_controls()
            elif key == BGM_KEY:
                self.options.toggle_bgm_mute()
                self.render_controls()


def main():
    parser = argparse.ArgumentParser(description="NumPick — Stream Deck reaction game")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--difficulty", choices=TIERS, help="Starting tier")
    parser.add_argument("--lang", choices=("ja", "en"), help="Text language")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Config not found: {config_path}")
        sys.exit(1)

    config = load_config(config_path)
    if args.difficulty:
        config.game.difficulty = args.difficulty
    if args.lang:
        config.options.language = args.lang
    set_font_paths(config.deck.font_path, config.deck.ja_font_path)

    deck = find_deck()
    if deck is None:
        print("No Stream Deck found. Is it plugged in?")
        sys.exit(1)
    if deck.key_count() < KEY_COUNT:
        print(f"NumPick needs a {KEY_COUNT}-key Stream Deck, found {deck.key_count()} keys.")
        sys.exit(1)

    audio = AudioManager(assets_dir=config.audio.assets_dir, player=config.audio.player)
    if audio.generate_sfx():
        print("Sound effects: ON")
    else:
        print("Sound effects: OFF (generation failed)")

    app = NumPickDeck(config=config, deck=deck, audio=audio, verbose=args.verbose)
    print(f"Connected: {deck.deck_type()} ({deck.key_count()} keys)")
    app.start()

    try:
        app.exit_event.wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        app.stop()
        audio.dispose()
        print("Done.")


if __name__ == "__main__":
    main()
