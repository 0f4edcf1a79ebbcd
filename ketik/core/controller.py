"""Drives one game: keyboard input, batch rollover, countdown and finish."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from PySide6.QtCore import QObject, QTimer, Signal

from ketik.core.outcomes import GameResult, OutcomeHandler
from ketik.core.session import TypingSession
from ketik.ui.highlight import render_html

logger = logging.getLogger(__name__)

BACKSPACE = "\b"
_IGNORED_CONTROL = {"\t", "\r", "\n", "\x1b"}


class BatchSupplier(Protocol):
    @property
    def exhausted(self) -> bool: ...

    def next_batch(self) -> List[str]: ...


class GameController(QObject):
    """Feeds keystrokes into a TypingSession and decides when the game ends.

    A ``time_limit`` of 0 means an untimed game that ends once the supplier
    runs out of words. The countdown only starts with the first keystroke.
    """

    display_changed = Signal()
    stats_changed = Signal(int, float)  # net WPM, accuracy
    time_changed = Signal(int)  # remaining seconds
    finished = Signal(object)  # GameResult

    def __init__(
        self,
        session: TypingSession,
        supplier: BatchSupplier,
        outcome_handler: OutcomeHandler,
        time_limit: int = 0,
        language: str = "",
        user_id: Optional[int] = None,
        tick_interval_ms: int = 100,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._supplier = supplier
        self._outcome_handler = outcome_handler
        self._time_limit = time_limit
        self._language = language
        self._user_id = user_id
        self._typing_started = False
        self._result: Optional[GameResult] = None

        self._timer = QTimer(self)
        self._timer.setInterval(tick_interval_ms)
        self._timer.timeout.connect(self.tick)

    @property
    def session(self) -> TypingSession:
        return self._session

    @property
    def time_limit(self) -> int:
        return self._time_limit

    @property
    def typing_started(self) -> bool:
        return self._typing_started

    @property
    def result(self) -> Optional[GameResult]:
        """Final metrics once the game has finished, else None."""
        return self._result

    def display_html(self) -> str:
        """Highlighted rich text of the active batch."""
        session = self._session
        return render_html(session.target_text, session.char_status, session.cursor)

    def start(self) -> None:
        self._typing_started = False
        self._result = None
        self._session.start(self._supplier.next_batch())
        self.display_changed.emit()

    def handle_key(self, text: str) -> None:
        """Handle the text of one key event; only its first character counts."""
        if not self._session.is_running or not text:
            return
        char = text[0]

        if char == BACKSPACE:
            if self._session.process_backspace():
                self.display_changed.emit()
            return

        if char in _IGNORED_CONTROL or not (32 <= ord(char) <= 126):
            return

        if not self._typing_started:
            self._typing_started = True
            self._session.reset_clock()
            self._timer.start()

        if self._at_batch_end():
            self._advance()
            return

        session = self._session
        session.process_keystroke(char, session.target_text[session.cursor])

        if self._at_batch_end():
            self._advance()
            if not self._session.is_running:
                return
        else:
            self.display_changed.emit()
        self._emit_stats()

    def tick(self) -> None:
        if not self._session.is_running:
            self._timer.stop()
            return
        if self._time_limit > 0:
            remaining_ms = self._time_limit * 1000 - self._session.elapsed_ms()
            if remaining_ms <= 0:
                self._finish()
                return
            self.time_changed.emit(remaining_ms // 1000)
        self._emit_stats()

    def give_up(self) -> None:
        """Abandon the game; no result is reported."""
        self._timer.stop()
        self._session.stop()
        logger.info("Game abandoned")

    def _at_batch_end(self) -> bool:
        return self._session.cursor >= len(self._session.target_text)

    def _advance(self) -> None:
        if self._supplier.exhausted:
            self._finish()
            return
        batch = self._supplier.next_batch()
        if not batch:
            self._finish()
            return
        self._session.load_batch(batch)
        self.display_changed.emit()

    def _finish(self) -> None:
        self._timer.stop()
        if not self._session.is_running:
            return
        self._result = self._session.finish(
            self._outcome_handler,
            time_mode=self._time_limit,
            language=self._language,
            user_id=self._user_id,
        )
        logger.info(
            "Game finished: net=%d gross=%d accuracy=%.1f",
            self._result.net_wpm,
            self._result.gross_wpm,
            self._result.accuracy,
        )
        self.finished.emit(self._result)

    def _emit_stats(self) -> None:
        elapsed = self._session.elapsed_ms()
        self.stats_changed.emit(
            self._session.calculate_net_wpm(elapsed),
            self._session.calculate_accuracy(),
        )
