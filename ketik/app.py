"""Logging setup and wiring of games for the Ketik typing test."""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Optional, Sequence

from PySide6.QtCore import QObject

from ketik.core.batches import SequentialBatchSupplier, ShuffledBatchSupplier, parse_custom_text
from ketik.core.config import LANG_CUSTOM, LANG_ENGLISH, GameSettings
from ketik.core.controller import GameController
from ketik.core.outcomes import ResultSink, ScoreRecorder, discard_result
from ketik.core.session import Clock, TypingSession, lenient_judge, strict_space_judge


class GameMode(Enum):
    TIMED = "timed"
    CUSTOM = "custom"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_game(
    mode: GameMode,
    words: Sequence[str],
    settings: Optional[GameSettings] = None,
    time_mode: Optional[int] = None,
    language: str = "",
    user_id: Optional[int] = None,
    sink: Optional[ResultSink] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
    parent: Optional[QObject] = None,
) -> GameController:
    """Create a controller for one game.

    Timed games shuffle the pool endlessly, judge spaces strictly and record
    the score of registered users through *sink*. Custom games keep the
    words in order, end when they run out and never record a score.
    """
    settings = settings or GameSettings()

    if mode is GameMode.TIMED:
        limit = settings.default_time_mode if time_mode is None else time_mode
        if limit not in settings.time_modes:
            raise ValueError(f"Unsupported time mode {limit}s; expected one of {list(settings.time_modes)}")
        session = TypingSession(judge=strict_space_judge, settings=settings, clock=clock)
        supplier = ShuffledBatchSupplier(words, settings.batch_size, rng=rng)
        handler = ScoreRecorder(sink) if sink is not None else discard_result
        return GameController(
            session,
            supplier,
            handler,
            time_limit=limit,
            language=language or LANG_ENGLISH,
            user_id=user_id,
            parent=parent,
        )

    custom_words = parse_custom_text(" ".join(words), settings.min_words_for_custom)
    session = TypingSession(judge=lenient_judge, settings=settings, clock=clock)
    return GameController(
        session,
        SequentialBatchSupplier(custom_words, settings.batch_size),
        discard_result,
        time_limit=0,
        language=language or LANG_CUSTOM,
        user_id=user_id,
        parent=parent,
    )
