"""Audio manager — BGM and sound effects for the front-end.

Created by the application at startup and disposed at shutdown; the game
engine never touches it. Playback shells out to a command-line player
(afplay on macOS) with process tracking so finished players get reaped and
runaway effects get killed. Every failure here is logged and swallowed so a
missing file or player never disturbs a round.
"""

import logging
import os
import shutil
import struct
import subprocess
import tempfile
import threading
import wave
from pathlib import Path

logger = logging.getLogger(__name__)

SAMPLE_RATE = 22050
MAX_CONCURRENT = 4
VOLUME_STEPS = 5

BGM_TRACKS = ("title", "game", "result")
SFX_NAMES = ("correct", "wrong", "countdown", "start", "tick")


# ── 8-bit synthesis (fallback when no sfx file is shipped) ──────────

def _triangle(freq: float, dur: float, vol: float = 1.0) -> list[float]:
    samples = []
    n = int(SAMPLE_RATE * dur)
    for i in range(n):
        t = i / SAMPLE_RATE
        phase = (t * freq) % 1.0
        val = (4 * abs(phase - 0.5) - 1) * vol
        env = min(1.0, i / (SAMPLE_RATE * 0.003))
        tail = max(0.0, 1.0 - (i / n) * 0.5)
        samples.append(val * env * tail)
    return samples


def _square(freq: float, dur: float, vol: float = 1.0, duty: float = 0.5) -> list[float]:
    samples = []
    n = int(SAMPLE_RATE * dur)
    for i in range(n):
        t = i / SAMPLE_RATE
        phase = (t * freq) % 1.0
        val = vol if phase < duty else -vol
        env = min(1.0, i / (SAMPLE_RATE * 0.003))
        tail = max(0.0, 1.0 - (i / n) * 0.8)
        samples.append(val * env * tail)
    return samples


def _write_wav(path: str, samples: list[float]):
    with wave.open(path, "w") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(SAMPLE_RATE)
        w.writeframes(b"".join(
            struct.pack("<h", int(max(-0.95, min(0.95, s)) * 32767))
            for s in samples
        ))


def synth_samples(name: str) -> list[float]:
    """Waveform for a named effect."""
    if name == "correct":   # E5 -> G5
        return _triangle(659, 0.08, 0.5) + _triangle(784, 0.12, 0.6)
    if name == "wrong":     # A4 -> E4
        return _square(440, 0.1, 0.35) + _square(330, 0.15, 0.3)
    if name == "countdown":
        return _square(880, 0.08, 0.3, 0.25)
    if name == "start":     # C5 -> E5 -> G5 -> C6
        return (_triangle(523, 0.07, 0.5) + _triangle(659, 0.07, 0.55) +
                _triangle(784, 0.07, 0.6) + _triangle(1047, 0.2, 0.7))
    if name == "tick":
        return _square(1319, 0.03, 0.2, 0.25)
    raise KeyError(name)


def volume_level(step: int) -> float:
    """Option steps 0..5 -> player gain 0.0..1.0."""
    return max(0.0, min(1.0, step / VOLUME_STEPS))


class AudioManager:
    def __init__(self, assets_dir: str | Path | None = None,
                 player: str = "afplay"):
        self.assets_dir = Path(assets_dir) if assets_dir else None
        self.player = player
        self.bgm_volume = 0.5
        self.sfx_volume = 0.7
        self.bgm_muted = False
        self.sfx_muted = False
        self.current_bgm: str | None = None

        self._lock = threading.Lock()
        self._processes: list[subprocess.Popen] = []
        self._bgm_process: subprocess.Popen | None = None
        self._bgm_stop = threading.Event()
        self._bgm_stop.set()
        self._sfx_cache: dict[str, str] = {}
        self._sfx_dir: str = ""
        self._disposed = False

    # ── lifecycle ─────────────────────────────────────────────────

    def generate_sfx(self) -> bool:
        """Synthesize fallback effects into a temp dir. False on failure."""
        try:
            self._sfx_dir = tempfile.mkdtemp(prefix="numpick-sfx-")
            for name in SFX_NAMES:
                path = os.path.join(self._sfx_dir, f"{name}.wav")
                _write_wav(path, synth_samples(name))
                self._sfx_cache[name] = path
        except OSError as e:
            logger.warning("Failed to generate sound effects: %s", e)
            return False
        return True

    def dispose(self):
        """Stop everything and remove generated files."""
        self._disposed = True
        self.stop_bgm()
        self.stop_all()
        if self._sfx_dir and os.path.isdir(self._sfx_dir):
            shutil.rmtree(self._sfx_dir, ignore_errors=True)
        self._sfx_cache.clear()

    def apply_options(self, options):
        """Mirror GameOptions volume/mute settings."""
        self.set_bgm_volume(volume_level(options.bgm_volume))
        self.set_sfx_volume(volume_level(options.sfx_volume))
        if options.bgm_muted != self.bgm_muted:
            self.set_bgm_muted(options.bgm_muted)
        if options.sfx_muted != self.sfx_muted:
            self.set_sfx_muted(options.sfx_muted)

    # ── process tracking ──────────────────────────────────────────

    def _command(self, path: str, volume: float) -> list[str]:
        if Path(self.player).name == "afplay":
            return [self.player, "-v", f"{volume:.2f}", path]
        return [self.player, path]

    def _spawn(self, path: str, volume: float) -> subprocess.Popen | None:
        try:
            return subprocess.Popen(
                self._command(path, volume),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning("Audio playback failed for %s: %s", path, e)
            return None

    def _reap(self):
        with self._lock:
            self._processes[:] = [p for p in self._processes if p.poll() is None]

    def stop_all(self):
        """Kill all running effects."""
        with self._lock:
            for p in self._processes:
                _kill(p)
            self._processes.clear()

    @property
    def active_count(self) -> int:
        self._reap()
        return len(self._processes)

    # ── sfx ───────────────────────────────────────────────────────

    def _sfx_path(self, name: str) -> str | None:
        if self.assets_dir:
            for ext in ("mp3", "wav"):
                p = self.assets_dir / "sfx" / f"{name}.{ext}"
                if p.exists():
                    return str(p)
        path = self._sfx_cache.get(name)
        if path and os.path.exists(path):
            return path
        return None

    def play_sfx(self, name: str):
        if self.sfx_muted or self._disposed:
            return
        path = self._sfx_path(name)
        if not path:
            logger.warning("SFX file not found: %s", name)
            return
        self._reap()
        with self._lock:
            while len(self._processes) >= MAX_CONCURRENT:
                _kill(self._processes.pop(0))
        p = self._spawn(path, self.sfx_volume)
        if p is not None:
            with self._lock:
                self._processes.append(p)

    def set_sfx_volume(self, volume: float):
        self.sfx_volume = max(0.0, min(1.0, volume))

    def set_sfx_muted(self, muted: bool):
        self.sfx_muted = muted
        if muted:
            self.stop_all()

    # ── bgm ───────────────────────────────────────────────────────

    def _bgm_path(self, name: str) -> str | None:
        if not self.assets_dir:
            return None
        p = self.assets_dir / "bgm" / f"{name}.mp3"
        return str(p) if p.exists() else None

    def play_bgm(self, name: str):
        """Loop a track. While muted only remember it for unmute."""
        if self.bgm_muted or self._disposed:
            self.stop_bgm()
            self.current_bgm = name
            return
        if self.current_bgm == name and not self._bgm_stop.is_set():
            return
        self.stop_bgm()
        self.current_bgm = name
        path = self._bgm_path(name)
        if not path:
            logger.warning("BGM file not found: %s.mp3", name)
            return
        self._bgm_stop = threading.Event()
        threading.Thread(
            target=self._bgm_loop, args=(path, self._bgm_stop), daemon=True,
        ).start()

    def _bgm_loop(self, path: str, stop: threading.Event):
        while not stop.is_set():
            p = self._spawn(path, self.bgm_volume)
            if p is None:
                return
            with self._lock:
                if stop.is_set():
                    _kill(p)
                    return
                self._bgm_process = p
            if p.wait() != 0 and not stop.is_set():
                logger.warning("BGM player exited with %s: %s", p.returncode, path)
                return

    def stop_bgm(self):
        """Stop the track but keep current_bgm so unmute can resume it."""
        self._bgm_stop.set()
        with self._lock:
            if self._bgm_process is not None:
                _kill(self._bgm_process)
                self._bgm_process = None

    def set_bgm_volume(self, volume: float):
        # afplay takes volume at launch; applies from the next loop
        self.bgm_volume = max(0.0, min(1.0, volume))

    def set_bgm_muted(self, muted: bool):
        self.bgm_muted = muted
        if muted:
            self.stop_bgm()
        elif self.current_bgm:
            self.play_bgm(self.current_bgm)


def _kill(p: subprocess.Popen):
    try:
        p.kill()
        p.wait(timeout=1)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Could not stop audio process %s: %s", p.pid, e)
