"""Tests for the session state machine."""

import random

import pytest

TIERS = ["beginner", "intermediate", "advanced", "master"]


def make_session(tier="beginner", seed=0, events=None):
    from numpick.session import GameSession

    on_event = (lambda name, snap: events.append(name)) if events is not None else None
    return GameSession(difficulty=tier, rng=random.Random(seed), on_event=on_event)


def right_answer(session):
    return next(n for n in session.numbers if session.condition.check(n, session.numbers))


def wrong_answer(session):
    # 0 is never on the board, so it is always judged wrong
    return 0


def test_initial_state_is_idle():
    s = make_session()
    assert s.phase == "idle"
    assert not s.playing
    assert s.score == 0
    assert s.time_left == 60
    assert s.numbers == ()
    assert s.condition is None


@pytest.mark.parametrize("tier", TIERS)
def test_start_uses_tier_settings(tier):
    from numpick.difficulty import DIFFICULTY_SETTINGS

    s = make_session(tier)
    assert s.start()
    assert s.playing
    assert s.phase == "playing"
    assert len(s.numbers) == DIFFICULTY_SETTINGS[tier].card_count
    assert s.time_left == DIFFICULTY_SETTINGS[tier].time
    assert s.condition is not None


def test_start_with_tier_argument():
    s = make_session()
    s.start("master")
    assert s.difficulty == "master"
    assert len(s.numbers) == 6


def test_start_ignored_while_playing():
    s = make_session()
    s.start()
    numbers = s.numbers
    assert not s.start()
    assert s.numbers == numbers


def test_correct_answer_scores_and_replaces_round():
    from numpick.session import REWARD

    events = []
    s = make_session(events=events)
    s.start()
    for _ in range(20):
        before_numbers, before_cond = s.numbers, s.condition
        time_before = s.time_left
        score_before = s.score
        assert s.submit_answer(right_answer(s)) is True
        assert s.score == score_before + REWARD
        assert s.time_left == time_before
        # a fresh round object every time, even if the values repeat
        assert s.condition is not before_cond
        assert s.numbers is not before_numbers
    assert s.correct_count == 20
    assert s.miss_count == 0
    assert events.count("correct") == 20
    assert events.count("round") == 20


def test_wrong_answer_costs_penalty_and_replaces_round():
    s = make_session("advanced")
    s.start()
    cond = s.condition
    assert s.submit_answer(wrong_answer(s)) is False
    assert s.time_left == 50 - 8
    assert s.miss_count == 1
    assert s.score == 0
    assert s.condition is not cond
    assert len(s.numbers) == 5


def test_penalty_clamps_at_zero():
    s = make_session("master")
    s.start()
    for _ in range(10):
        s.submit_answer(wrong_answer(s))
    assert s.time_left == 0
    assert s.miss_count == 10


def test_submit_ignored_when_not_playing():
    s = make_session()
    assert s.submit_answer(5) is None
    s.start()
    s.pause()
    assert s.submit_answer(right_answer(s)) is None
    assert s.score == 0
    assert s.miss_count == 0


def test_memory_condition_references_last_correct(monkeypatch):
    import numpick.session as session_mod

    # every round shows the same cards, so the previous answer is on the board
    monkeypatch.setattr(session_mod, "generate_numbers",
                        lambda count, rng=None: (10, 20, 30, 40, 50, 60)[:count])
    s = make_session("master", seed=5)
    s.start()
    seen_memory = False
    for _ in range(200):
        value = right_answer(s)
        s.submit_answer(value)
        if s.condition.kind.startswith("memory"):
            seen_memory = True
            assert s.condition.target == value
    assert seen_memory


def test_miss_never_yields_memory_condition(monkeypatch):
    import numpick.session as session_mod

    monkeypatch.setattr(session_mod, "generate_numbers",
                        lambda count, rng=None: (10, 20, 30, 40, 50, 60)[:count])
    s = make_session("master", seed=9)
    s.start()
    for i in range(300):
        if i % 2:
            s.submit_answer(wrong_answer(s))
            assert not s.condition.kind.startswith("memory")
        else:
            s.submit_answer(right_answer(s))
        if s.time_left == 0:
            s.reset()
            s.start()


def test_first_round_has_no_memory_condition(monkeypatch):
    import numpick.session as session_mod

    monkeypatch.setattr(session_mod, "generate_numbers",
                        lambda count, rng=None: (10, 20, 30, 40, 50, 60)[:count])
    for seed in range(50):
        s = make_session("master", seed=seed)
        s.start()
        assert not s.condition.kind.startswith("memory")


def test_tick_counts_down_and_ends_once():
    events = []
    s = make_session(events=events)
    s.start()
    previous = s.time_left
    while s.playing:
        s.tick()
        assert s.time_left == previous - 1
        previous = s.time_left
    assert s.time_left == 0
    assert s.phase == "ended"
    assert events.count("end") == 1
    s.tick()
    s.tick()
    assert events.count("end") == 1
    assert s.time_left == 0


def test_tick_ends_after_penalty_reaches_zero():
    s = make_session("master")
    s.start()
    for _ in range(5):
        s.submit_answer(wrong_answer(s))
    assert s.time_left == 0
    assert s.playing
    s.tick()
    assert not s.playing
    assert s.phase == "ended"


def test_tick_ignored_when_paused():
    s = make_session()
    s.start()
    s.pause()
    s.tick()
    assert s.time_left == 60


def test_pause_resume_keeps_round():
    s = make_session()
    s.start()
    s.tick()
    numbers, cond, left = s.numbers, s.condition, s.time_left
    assert s.pause()
    assert s.phase == "paused"
    assert not s.playing
    assert s.resume()
    assert s.playing
    assert (s.numbers, s.condition, s.time_left) == (numbers, cond, left)


def test_pause_and_resume_invalid_states():
    s = make_session()
    assert not s.pause()
    assert not s.resume()
    s.start()
    assert not s.resume()
    while s.playing:
        s.tick()
    assert not s.pause()
    assert not s.resume()


def test_reset_after_anything():
    s = make_session("intermediate")
    s.start()
    s.submit_answer(right_answer(s))
    s.submit_answer(wrong_answer(s))
    s.tick()
    s.pause()
    s.reset()
    assert s.phase == "idle"
    assert s.score == 0
    assert s.correct_count == 0
    assert s.miss_count == 0
    assert not s.playing
    assert s.time_left == 60
    assert s.numbers == ()
    assert s.condition is None


def test_retry_from_ended():
    s = make_session()
    s.start()
    s.submit_answer(right_answer(s))
    while s.playing:
        s.tick()
    assert s.phase == "ended"
    assert s.start()
    assert s.score == 0
    assert s.correct_count == 0
    assert s.time_left == 60


def test_set_difficulty_only_between_sessions():
    s = make_session()
    assert s.set_difficulty("advanced")
    assert s.time_left == 50
    s.start()
    assert not s.set_difficulty("master")
    assert s.difficulty == "advanced"
    assert len(s.numbers) == 5
    s.pause()
    assert not s.set_difficulty("master")
    assert not s.set_difficulty("bogus")


def test_set_difficulty_then_reset_uses_new_budget():
    s = make_session()
    s.start()
    while s.playing:
        s.tick()
    assert s.set_difficulty("master")
    s.reset()
    assert s.time_left == 45


def test_unknown_initial_tier_falls_back():
    s = make_session("impossible")
    assert s.difficulty == "beginner"


def test_snapshot_reflects_state():
    from numpick.options import GameOptions
    from numpick.session import GameSession

    opts = GameOptions(language="en")
    s = GameSession(options=opts, rng=random.Random(2))
    s.start()
    snap = s.snapshot()
    assert snap.phase == "playing"
    assert snap.numbers == s.numbers
    assert snap.condition == s.condition
    assert snap.language == "en"
    assert s.options.language == "en"


def test_event_sequence():
    events = []
    s = make_session(events=events)
    s.start()
    s.pause()
    s.resume()
    s.submit_answer(wrong_answer(s))
    s.reset()
    assert events == ["start", "pause", "resume", "miss", "round", "reset"]


def test_state_is_read_only():
    s = make_session()
    with pytest.raises(AttributeError):
        s.score = 1000
