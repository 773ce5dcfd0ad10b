# practice/aggregator.py
"""
Pure statistics computations for practice sessions.

Two steps:
  1) ``summarize_session`` turns the keystroke results of one closed session
     into per-session metrics.
  2) ``fold`` merges those metrics into a user's running aggregate.

Running averages are per-session means: every session weighs one unit no
matter how many keys it contained, and the update uses the pre-increment
session count, ``avg' = (avg * n + x) / (n + 1)``.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, replace
from typing import Iterable, Optional

from .exceptions import ValidationError

_STAT_FIELDS = (
    "total_sessions",
    "total_key_presses",
    "correct_key_presses",
    "average_kpm",
    "best_kpm",
    "average_accuracy",
    "best_accuracy",
    "average_response_time_ms",
    "best_response_time_ms",
    "last_session_at",
    "version",
)


@dataclass(frozen=True)
class SessionMetrics:
    total_key_presses: int
    correct_key_presses: int
    accuracy_percent: float
    average_response_time_ms: float
    kpm: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Immutable copy of a ``UserStatistics`` row."""

    total_sessions: int = 0
    total_key_presses: int = 0
    correct_key_presses: int = 0
    average_kpm: float = 0.0
    best_kpm: float = 0.0
    average_accuracy: float = 0.0
    best_accuracy: float = 0.0
    average_response_time_ms: float = 0.0
    best_response_time_ms: float = 0.0
    last_session_at: Optional[dt.datetime] = None
    version: int = 0

    @classmethod
    def from_row(cls, row) -> "StatisticsSnapshot":
        return cls(**{name: getattr(row, name) for name in _STAT_FIELDS})

    def as_fields(self) -> dict:
        return asdict(self)


def summarize_session(results: Iterable, nominal_duration_seconds: int) -> SessionMetrics:
    """Derive accuracy, response time and KPM from one session's keystrokes.

    KPM counts correct presses only and divides by the *nominal* duration,
    never by the wall-clock time the client actually took.
    """
    results = list(results)
    if not results:
        raise ValidationError("no keystrokes recorded")
    if not nominal_duration_seconds or nominal_duration_seconds <= 0:
        raise ValidationError("nominal duration must be positive", field="nominal_duration_seconds")

    total = len(results)
    correct = sum(1 for r in results if r.is_correct)
    total_rt = sum(r.response_time_ms for r in results)

    return SessionMetrics(
        total_key_presses=total,
        correct_key_presses=correct,
        accuracy_percent=100.0 * correct / total,
        average_response_time_ms=total_rt / total,
        kpm=correct / (nominal_duration_seconds / 60.0),
    )


def _running_mean(avg: float, n: int, value: float) -> float:
    return (avg * n + value) / (n + 1)


def fold(stats: StatisticsSnapshot, metrics: SessionMetrics, *, now: dt.datetime) -> StatisticsSnapshot:
    """Return ``stats`` with one more completed session folded in."""
    n = stats.total_sessions

    # 0 is the "never set" marker; a lower response time is better.
    if stats.best_response_time_ms == 0:
        best_rt = metrics.average_response_time_ms
    else:
        best_rt = min(stats.best_response_time_ms, metrics.average_response_time_ms)

    return replace(
        stats,
        total_sessions=n + 1,
        total_key_presses=stats.total_key_presses + metrics.total_key_presses,
        correct_key_presses=stats.correct_key_presses + metrics.correct_key_presses,
        average_kpm=_running_mean(stats.average_kpm, n, metrics.kpm),
        best_kpm=max(stats.best_kpm, metrics.kpm),
        average_accuracy=_running_mean(stats.average_accuracy, n, metrics.accuracy_percent),
        best_accuracy=max(stats.best_accuracy, metrics.accuracy_percent),
        average_response_time_ms=_running_mean(stats.average_response_time_ms, n, metrics.average_response_time_ms),
        best_response_time_ms=best_rt,
        last_session_at=now,
        version=stats.version + 1,
    )
