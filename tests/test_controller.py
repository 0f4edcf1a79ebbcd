"""Tests for ketik.core.controller – key handling, rollover and game end."""

from __future__ import annotations

import random

import pytest

from ketik.core.batches import SequentialBatchSupplier, ShuffledBatchSupplier
from ketik.core.controller import BACKSPACE, GameController
from ketik.core.outcomes import GameResult
from ketik.core.session import CharStatus, TypingSession, strict_space_judge


class Recorder:
    """Collects everything a controller emits."""

    def __init__(self, controller: GameController) -> None:
        self.display = 0
        self.stats = []
        self.times = []
        self.finished = []
        controller.display_changed.connect(self._on_display)
        controller.stats_changed.connect(lambda wpm, acc: self.stats.append((wpm, acc)))
        controller.time_changed.connect(self.times.append)
        controller.finished.connect(self.finished.append)

    def _on_display(self) -> None:
        self.display += 1


def type_keys(controller: GameController, keys: str) -> None:
    for ch in keys:
        controller.handle_key(ch)


@pytest.fixture()
def handled():
    return []


@pytest.fixture()
def custom_game(qcore_app, clock, handled) -> GameController:
    session = TypingSession(clock=clock)
    supplier = SequentialBatchSupplier(["ab", "cd", "ef"], batch_size=2)
    controller = GameController(session, supplier, handled.append, language="Custom")
    return controller


@pytest.fixture()
def timed_game(qcore_app, clock, handled) -> GameController:
    session = TypingSession(judge=strict_space_judge, clock=clock)
    supplier = ShuffledBatchSupplier(["aa", "bb", "cc"], batch_size=3, rng=random.Random(0))
    return GameController(
        session, supplier, handled.append, time_limit=15, language="English", user_id=5
    )


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------

class TestStart:
    def test_loads_first_batch(self, custom_game: GameController):
        rec = Recorder(custom_game)
        custom_game.start()
        assert custom_game.session.is_running
        assert custom_game.session.target_text == "ab cd "
        assert rec.display == 1
        assert not custom_game.typing_started
        assert custom_game.result is None

    def test_key_before_start_ignored(self, custom_game: GameController):
        custom_game.handle_key("a")
        assert custom_game.session.cursor == 0


# ---------------------------------------------------------------------------
# handle_key
# ---------------------------------------------------------------------------

class TestHandleKey:
    def test_first_key_starts_clock_and_timer(self, custom_game: GameController, clock):
        custom_game.start()
        clock.advance(7000)
        custom_game.handle_key("a")
        assert custom_game.typing_started
        assert custom_game.session.started_at_ms == clock.now
        assert custom_game._timer.isActive()
        custom_game.give_up()

    def test_correct_key_advances(self, custom_game: GameController):
        rec = Recorder(custom_game)
        custom_game.start()
        custom_game.handle_key("a")
        assert custom_game.session.cursor == 1
        assert custom_game.session.char_status[0] is CharStatus.CORRECT
        assert rec.display == 2
        assert rec.stats == [(0, 100.0)]
        custom_game.give_up()

    @pytest.mark.parametrize("key", ["", "\t", "\r", "\n", "\x1b", "\x01", "é", "\x7f"])
    def test_ignored_keys(self, custom_game: GameController, key):
        custom_game.start()
        custom_game.handle_key(key)
        assert custom_game.session.cursor == 0
        assert custom_game.session.batch.total_keystrokes == 0
        assert not custom_game.typing_started

    def test_multi_char_text_judges_first_char(self, custom_game: GameController):
        custom_game.start()
        custom_game.handle_key("ab")
        session = custom_game.session
        assert session.cursor == 1
        assert session.char_status[0] is CharStatus.CORRECT
        assert session.batch.total_keystrokes == 1
        custom_game.give_up()

    def test_multi_char_text_starting_with_control_ignored(self, custom_game: GameController):
        custom_game.start()
        custom_game.handle_key("\tab")
        assert custom_game.session.cursor == 0
        assert not custom_game.typing_started

    def test_backspace(self, custom_game: GameController):
        rec = Recorder(custom_game)
        custom_game.start()
        type_keys(custom_game, "ax")
        custom_game.handle_key(BACKSPACE)
        assert custom_game.session.cursor == 1
        assert custom_game.session.batch.total_keystrokes == 2
        assert rec.display == 4
        custom_game.give_up()

    def test_backspace_at_start_emits_nothing(self, custom_game: GameController):
        rec = Recorder(custom_game)
        custom_game.start()
        custom_game.handle_key(BACKSPACE)
        assert rec.display == 1

    def test_rollover_loads_next_batch(self, custom_game: GameController):
        custom_game.start()
        type_keys(custom_game, "ab cd ")
        session = custom_game.session
        assert session.is_running
        assert session.target_text == "ef "
        assert session.cursor == 0
        assert session.history.correct_chars == 6
        custom_game.give_up()


# ---------------------------------------------------------------------------
# Custom (untimed) game end
# ---------------------------------------------------------------------------

class TestCustomFinish:
    def test_finishes_when_words_run_out(self, custom_game: GameController, clock, handled):
        rec = Recorder(custom_game)
        custom_game.start()
        type_keys(custom_game, "ab cd ")
        clock.advance(30_000)
        type_keys(custom_game, "ef ")

        assert not custom_game.session.is_running
        assert len(handled) == 1
        assert rec.finished == handled
        result = custom_game.result
        assert isinstance(result, GameResult)
        assert result.time_mode == 0
        assert result.language == "Custom"
        assert result.accuracy == 100.0
        # 9 correct chars in 30 s -> (9 / 5) / 0.5 = 3.6
        assert result.net_wpm == 3

    def test_no_input_after_finish(self, custom_game: GameController, handled):
        custom_game.start()
        type_keys(custom_game, "ab cd ef ")
        type_keys(custom_game, "xyz")
        assert len(handled) == 1
        assert custom_game.session.batch.total_keystrokes == 3

    def test_untimed_tick_emits_no_time(self, custom_game: GameController):
        rec = Recorder(custom_game)
        custom_game.start()
        custom_game.handle_key("a")
        custom_game.tick()
        assert rec.times == []
        assert len(rec.stats) == 2
        custom_game.give_up()


# ---------------------------------------------------------------------------
# Timed game
# ---------------------------------------------------------------------------

class TestTimedGame:
    def test_countdown_and_expiry(self, timed_game: GameController, clock, handled):
        rec = Recorder(timed_game)
        timed_game.start()
        timed_game.handle_key(timed_game.session.target_text[0])
        clock.advance(5000)
        timed_game.tick()
        assert rec.times == [10]
        assert timed_game.session.is_running

        clock.advance(10_000)
        timed_game.tick()
        assert not timed_game.session.is_running
        assert len(handled) == 1
        result = handled[0]
        assert result.time_mode == 15
        assert result.language == "English"
        assert result.user_id == 5
        assert not timed_game._timer.isActive()

    def test_tick_after_finish_is_quiet(self, timed_game: GameController, clock, handled):
        rec = Recorder(timed_game)
        timed_game.start()
        timed_game.handle_key("a")
        clock.advance(15_000)
        timed_game.tick()
        timed_game.tick()
        assert len(handled) == 1
        assert len(rec.finished) == 1

    def test_endless_rollover(self, timed_game: GameController):
        timed_game.start()
        for _ in range(5):
            type_keys(timed_game, timed_game.session.target_text)
        assert timed_game.session.is_running
        assert timed_game.session.history.total_keystrokes == 5 * 9
        timed_game.give_up()

    def test_space_typed_for_letter_is_wrong(self, timed_game: GameController):
        timed_game.start()
        timed_game.handle_key(" ")
        assert timed_game.session.char_status[0] is CharStatus.WRONG
        timed_game.give_up()

    def test_empty_pool_finishes_on_first_key(self, qcore_app, clock, handled):
        session = TypingSession(clock=clock)
        controller = GameController(session, ShuffledBatchSupplier([]), handled.append, time_limit=30)
        controller.start()
        controller.handle_key("a")
        assert not session.is_running
        assert len(handled) == 1


# ---------------------------------------------------------------------------
# display_html
# ---------------------------------------------------------------------------

class TestDisplayHtml:
    def test_highlights_typed_and_current(self, custom_game: GameController):
        custom_game.start()
        type_keys(custom_game, "ax")
        html = custom_game.display_html()
        assert html.startswith('<span class="char-correct"')
        assert 'class="char-wrong"' in html
        assert '<span class="char-current"' in html
        custom_game.give_up()

    def test_wrong_space_shown_as_underscore(self, custom_game: GameController):
        custom_game.start()
        type_keys(custom_game, "abx")
        assert 'class="space-error"' in custom_game.display_html()
        assert ">_</span>" in custom_game.display_html()
        custom_game.give_up()


# ---------------------------------------------------------------------------
# give_up
# ---------------------------------------------------------------------------

class TestGiveUp:
    def test_no_result_reported(self, timed_game: GameController, handled):
        rec = Recorder(timed_game)
        timed_game.start()
        timed_game.handle_key("a")
        timed_game.give_up()
        assert not timed_game.session.is_running
        assert not timed_game._timer.isActive()
        assert handled == []
        assert rec.finished == []
        assert timed_game.result is None
