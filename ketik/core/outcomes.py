from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameResult:
    """Final metrics of a finished game."""

    net_wpm: int
    gross_wpm: int
    accuracy: float
    weighted_score: float
    time_mode: int = 0
    language: str = ""
    user_id: Optional[int] = None


class ResultSink(Protocol):
    def __call__(self, result: GameResult) -> Any: ...


OutcomeHandler = Callable[[GameResult], Any]


def discard_result(result: GameResult) -> None:
    """Sandbox handler: practice scores never reach the leaderboard."""
    logger.info(
        "Custom game finished. Score not saved (sandbox mode). Language: %s",
        result.language,
    )


class ScoreRecorder:
    """Ranked handler: forwards results of registered users to *sink*.

    Guests (no user id, or a non-positive one) are skipped.
    """

    def __init__(self, sink: ResultSink) -> None:
        self._sink = sink

    def __call__(self, result: GameResult) -> bool:
        if result.user_id is None or result.user_id <= 0:
            logger.info("Guest game finished; score not recorded")
            return False
        self._sink(result)
        logger.info(
            "Recorded score for user %s: net=%d gross=%d acc=%.1f score=%.1f (%ss, %s)",
            result.user_id,
            result.net_wpm,
            result.gross_wpm,
            result.accuracy,
            result.weighted_score,
            result.time_mode,
            result.language,
        )
        return True


def format_accuracy(accuracy: float) -> str:
    return f"{accuracy:.1f}%"


def format_time_mode(seconds: int) -> str:
    """``"30s"``, or ``"∞"`` for untimed games."""
    return f"{seconds}s" if seconds > 0 else "∞"


def format_weighted_score(score: float) -> str:
    return f"{score:.1f}"


def format_wpm_detail(net_wpm: int, gross_wpm: int) -> str:
    return f"Net: {net_wpm} | Gross: {gross_wpm}"
