"""Session state machine — owns score, time, and the current round.

All mutation goes through the command methods. Commands issued in a state
where they make no sense are silent no-ops. The session has no side effects
beyond calling `on_event(name, snapshot)`; audio and rendering react to those
events elsewhere.

Phases:
    idle     no round content, full time budget
    playing  round on screen, clock running
    paused   round frozen, time frozen, resumable
    ended    time ran out, last round kept for the result screen
"""

import random
from collections.abc import Callable
from dataclasses import dataclass

from numpick.conditions import Condition, generate_condition
from numpick.difficulty import DEFAULT_TIER, DifficultySetting, DifficultyTable
from numpick.evaluator import evaluate
from numpick.numberset import generate_numbers
from numpick.options import GameOptions

REWARD = 100


@dataclass(frozen=True)
class SessionSnapshot:
    phase: str
    score: int
    time_left: int
    playing: bool
    numbers: tuple[int, ...]
    condition: Condition | None
    difficulty: str
    correct_count: int
    miss_count: int
    language: str


class GameSession:
    def __init__(self, difficulty: str = DEFAULT_TIER,
                 table: DifficultyTable | None = None,
                 options: GameOptions | None = None,
                 rng: random.Random | None = None,
                 on_event: Callable | None = None):
        self._table = table or DifficultyTable()
        if difficulty not in self._table:
            difficulty = DEFAULT_TIER
        self._difficulty = difficulty
        self._options = options or GameOptions()
        self._rng = rng or random.Random()
        self.on_event = on_event

        self._score = 0
        self._time_left = self.setting.time
        self._playing = False
        self._numbers: tuple[int, ...] = ()
        self._condition: Condition | None = None
        self._correct_count = 0
        self._miss_count = 0
        self._last_correct: int | None = None

    # ── queries ───────────────────────────────────────────────────

    @property
    def score(self) -> int:
        return self._score

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def numbers(self) -> tuple[int, ...]:
        return self._numbers

    @property
    def condition(self) -> Condition | None:
        return self._condition

    @property
    def difficulty(self) -> str:
        return self._difficulty

    @property
    def setting(self) -> DifficultySetting:
        return self._table[self._difficulty]

    @property
    def table(self) -> DifficultyTable:
        return self._table

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def miss_count(self) -> int:
        return self._miss_count

    @property
    def options(self) -> GameOptions:
        return self._options

    @property
    def phase(self) -> str:
        if self._playing:
            return "playing"
        if self._condition is None:
            return "idle"
        if self._time_left == 0:
            return "ended"
        return "paused"

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            score=self._score,
            time_left=self._time_left,
            playing=self._playing,
            numbers=self._numbers,
            condition=self._condition,
            difficulty=self._difficulty,
            correct_count=self._correct_count,
            miss_count=self._miss_count,
            language=self._options.language,
        )

    # ── internals ─────────────────────────────────────────────────

    def _emit(self, name: str):
        if self.on_event:
            self.on_event(name, self.snapshot())

    def _next_round(self):
        """Replace numbers and condition; consumes the remembered answer."""
        previous = self._last_correct
        self._last_correct = None
        self._numbers = generate_numbers(self.setting.card_count, self._rng)
        self._condition = generate_condition(
            self._numbers, self._difficulty, previous, self._rng,
        )

    # ── commands ──────────────────────────────────────────────────

    def set_difficulty(self, tier: str) -> bool:
        """Change tier between sessions. Ignored mid-session."""
        if tier not in self._table or self.phase not in ("idle", "ended"):
            return False
        self._difficulty = tier
        if self.phase == "idle":
            self._time_left = self.setting.time
        return True

    def start(self, difficulty: str | None = None) -> bool:
        if self.phase not in ("idle", "ended"):
            return False
        if difficulty is not None:
            self.set_difficulty(difficulty)
        self._score = 0
        self._correct_count = 0
        self._miss_count = 0
        self._time_left = self.setting.time
        self._last_correct = None
        self._next_round()
        self._playing = True
        self._emit("start")
        return True

    def submit_answer(self, value) -> bool | None:
        """Judge a pick and advance. Returns the verdict, or None if ignored."""
        if not self._playing or self._condition is None:
            return None
        correct = evaluate(value, self._numbers, self._condition)
        if correct:
            self._score += REWARD
            self._correct_count += 1
            self._last_correct = value
        else:
            self._time_left = max(0, self._time_left - self.setting.penalty)
            self._miss_count += 1
            self._last_correct = None
        self._next_round()
        self._emit("correct" if correct else "miss")
        self._emit("round")
        return correct

    def tick(self) -> None:
        if not self._playing:
            return
        if self._time_left > 0:
            self._time_left -= 1
        if self._time_left == 0:
            self._playing = False
            self._emit("end")

    def pause(self) -> bool:
        if self.phase != "playing" or self._time_left == 0:
            return False
        self._playing = False
        self._emit("pause")
        return True

    def resume(self) -> bool:
        if self.phase != "paused":
            return False
        self._playing = True
        self._emit("resume")
        return True

    def reset(self) -> None:
        self._playing = False
        self._score = 0
        self._correct_count = 0
        self._miss_count = 0
        self._numbers = ()
        self._condition = None
        self._last_correct = None
        self._time_left = self.setting.time
        self._emit("reset")
