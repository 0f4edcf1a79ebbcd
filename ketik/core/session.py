from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ketik.core.config import GameSettings
from ketik.core.outcomes import GameResult, OutcomeHandler

logger = logging.getLogger(__name__)

Judge = Callable[[str, str], bool]
Clock = Callable[[], int]


class CharStatus(Enum):
    UNTYPED = "untyped"
    CORRECT = "correct"
    WRONG = "wrong"


def lenient_judge(typed: str, target: str) -> bool:
    """Plain equality, used for free practice on custom text."""
    return typed == target


def strict_space_judge(typed: str, target: str) -> bool:
    """Equality, except that spaces may only ever match spaces.

    Pressing space where a letter is due, or a letter where a space is due,
    is always wrong. With literal targets this coincides with equality; it
    only differs if the target text ever carries other whitespace.
    """
    if typed == " " and target != " ":
        return False
    if typed != " " and target == " ":
        return False
    return typed == target


@dataclass
class Counters:
    """One set of the four running tallies.

    ``correct_chars``/``error_chars`` follow the visible text and are undone
    by backspace. ``total_keystrokes``/``correct_keystrokes`` only ever grow.
    """

    correct_chars: int = 0
    error_chars: int = 0
    total_keystrokes: int = 0
    correct_keystrokes: int = 0

    def add(self, other: Counters) -> None:
        self.correct_chars += other.correct_chars
        self.error_chars += other.error_chars
        self.total_keystrokes += other.total_keystrokes
        self.correct_keystrokes += other.correct_keystrokes

    def combined(self, other: Counters) -> Counters:
        total = replace(self)
        total.add(other)
        return total


@dataclass
class SessionState:
    """Current-batch tallies plus everything folded in from earlier batches."""

    batch: Counters = field(default_factory=Counters)
    history: Counters = field(default_factory=Counters)

    def totals(self) -> Counters:
        return self.history.combined(self.batch)

    def roll_over(self) -> None:
        self.history.add(self.batch)
        self.batch = Counters()


# ---------------------------------------------------------------------------
# Metric formulas
# ---------------------------------------------------------------------------

def _elapsed_minutes(elapsed_ms: int, min_minutes: float) -> Optional[float]:
    minutes = elapsed_ms / 60000.0
    if minutes < min_minutes:
        return None
    return minutes


def gross_wpm(state: SessionState, elapsed_ms: int, settings: GameSettings = GameSettings()) -> int:
    """(all typed characters / chars-per-word) / minutes, truncated."""
    minutes = _elapsed_minutes(elapsed_ms, settings.min_minutes_for_wpm)
    if minutes is None:
        return 0
    totals = state.totals()
    typed = totals.correct_chars + totals.error_chars
    return int((typed / settings.characters_per_word) / minutes)


def net_wpm(state: SessionState, elapsed_ms: int, settings: GameSettings = GameSettings()) -> int:
    """(correct characters / chars-per-word) / minutes, truncated."""
    minutes = _elapsed_minutes(elapsed_ms, settings.min_minutes_for_wpm)
    if minutes is None:
        return 0
    return int((state.totals().correct_chars / settings.characters_per_word) / minutes)


def accuracy(state: SessionState) -> float:
    """Correct keystrokes over all keystrokes, in percent; 100 before any input."""
    totals = state.totals()
    if totals.total_keystrokes == 0:
        return 100.0
    return totals.correct_keystrokes / totals.total_keystrokes * 100.0


def weighted_score(net: int, acc: float, weight: float = GameSettings.accuracy_weight) -> float:
    return net * (acc / 100.0) ** weight


def _now_ms() -> int:
    return int(time.time() * 1000)


class TypingSession:
    """Judges keystrokes against a batch of words and keeps score.

    Text arrives in batches ("infinite scroll"): every word is followed by a
    single space, and loading the next batch folds the finished batch's
    tallies into history so that only the active batch is held in memory.

    Speed and accuracy:
      * **Gross WPM** – (correct + wrong characters / 5) / elapsed minutes.
      * **Net WPM** – (correct characters / 5) / elapsed minutes.
      * **Accuracy** – correct keystrokes / all keystrokes. A keystroke is
        counted the moment it is typed; fixing it with backspace does not
        give it back.
      * **Weighted score** – net WPM × (accuracy / 100) ** 1.5.

    Keystroke judgment and what happens to the final result are injected:
    ``judge`` decides correctness and ``finish`` takes an outcome handler.
    """

    def __init__(
        self,
        judge: Judge = lenient_judge,
        settings: Optional[GameSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._judge = judge
        self._settings = settings or GameSettings()
        self._clock = clock or _now_ms
        self._state = SessionState()
        self._target_text = ""
        self._char_status: List[CharStatus] = []
        # Judgments for keystrokes typed past the end of the batch.
        self._overflow: List[CharStatus] = []
        self._cursor = 0
        self._started_at_ms = 0
        self._running = False

    # -- read-only view ------------------------------------------------------

    @property
    def target_text(self) -> str:
        """Text of the active batch, one trailing space per word."""
        return self._target_text

    @property
    def char_status(self) -> Tuple[CharStatus, ...]:
        return tuple(self._char_status)

    @property
    def cursor(self) -> int:
        """Index of the next character to judge."""
        return self._cursor

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def started_at_ms(self) -> int:
        return self._started_at_ms

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def batch(self) -> Counters:
        """Copy of the current batch's tallies."""
        return replace(self._state.batch)

    @property
    def history(self) -> Counters:
        """Copy of the tallies folded in from earlier batches."""
        return replace(self._state.history)

    @property
    def total_errors(self) -> int:
        return self._state.history.error_chars + self._state.batch.error_chars

    @property
    def total_correct_chars(self) -> int:
        return self._state.history.correct_chars + self._state.batch.correct_chars

    def elapsed_ms(self) -> int:
        return self._clock() - self._started_at_ms

    # -- lifecycle -----------------------------------------------------------

    def start(self, words: Sequence[str]) -> None:
        """Begin a fresh attempt with *words* as the first batch."""
        self._state = SessionState()
        self._cursor = 0
        self.load_batch(words)
        self._started_at_ms = self._clock()
        self._running = True
        logger.debug("Session started with %d words", len(words))

    def reset_clock(self) -> None:
        """Restart elapsed time, e.g. on the first keystroke."""
        self._started_at_ms = self._clock()

    def load_batch(self, words: Sequence[str]) -> None:
        """Fold the current batch into history and make *words* the active text."""
        self._state.roll_over()
        self._cursor = 0
        self._target_text = "".join(f"{word} " for word in words)
        self._char_status = [CharStatus.UNTYPED] * len(self._target_text)
        self._overflow = []
        logger.debug("Loaded batch of %d words (%d chars)", len(words), len(self._target_text))

    def stop(self) -> None:
        """Give up: stop accepting input without reporting a result."""
        self._running = False

    def finish(
        self,
        outcome_handler: OutcomeHandler,
        time_mode: int = 0,
        language: str = "",
        user_id: Optional[int] = None,
    ) -> GameResult:
        """Stop the session and hand the final metrics to *outcome_handler*."""
        self._running = False
        result = self.result(time_mode=time_mode, language=language, user_id=user_id)
        outcome_handler(result)
        return result

    def result(
        self,
        time_mode: int = 0,
        language: str = "",
        user_id: Optional[int] = None,
    ) -> GameResult:
        elapsed = self.elapsed_ms()
        return GameResult(
            net_wpm=self.calculate_net_wpm(elapsed),
            gross_wpm=self.calculate_gross_wpm(elapsed),
            accuracy=self.calculate_accuracy(),
            weighted_score=self.calculate_weighted_score(elapsed),
            time_mode=time_mode,
            language=language,
            user_id=user_id,
        )

    # -- input ---------------------------------------------------------------

    def process_keystroke(self, typed: str, target: str) -> None:
        if not self._running:
            return
        is_correct = self._judge(typed, target)
        batch = self._state.batch

        # Permanent: backspace never takes a keystroke back.
        batch.total_keystrokes += 1
        if is_correct:
            batch.correct_keystrokes += 1

        status = CharStatus.CORRECT if is_correct else CharStatus.WRONG
        if self._cursor < len(self._char_status):
            self._char_status[self._cursor] = status
        else:
            self._overflow.append(status)

        if is_correct:
            batch.correct_chars += 1
        else:
            batch.error_chars += 1

        self._cursor += 1

    def process_backspace(self) -> bool:
        """Un-type the previous character. Returns False if there is none."""
        if not self._running or self._cursor <= 0:
            return False
        self._cursor -= 1
        if self._cursor < len(self._char_status):
            status = self._char_status[self._cursor]
            self._char_status[self._cursor] = CharStatus.UNTYPED
        elif self._overflow:
            status = self._overflow.pop()
        else:
            status = CharStatus.UNTYPED
        if status is CharStatus.CORRECT:
            self._state.batch.correct_chars -= 1
        elif status is CharStatus.WRONG:
            self._state.batch.error_chars -= 1
        return True

    # -- metrics -------------------------------------------------------------

    def calculate_gross_wpm(self, elapsed_ms: int) -> int:
        return gross_wpm(self._state, elapsed_ms, self._settings)

    def calculate_net_wpm(self, elapsed_ms: int) -> int:
        return net_wpm(self._state, elapsed_ms, self._settings)

    def calculate_accuracy(self) -> float:
        return accuracy(self._state)

    def calculate_weighted_score(self, elapsed_ms: int) -> float:
        return weighted_score(
            self.calculate_net_wpm(elapsed_ms),
            self.calculate_accuracy(),
            self._settings.accuracy_weight,
        )
