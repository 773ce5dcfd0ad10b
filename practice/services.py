# practice/services.py
from __future__ import annotations

import datetime as dt
import logging
import random
import string
from dataclasses import dataclass
from typing import List, Mapping, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from . import aggregator
from .aggregator import SessionMetrics, StatisticsSnapshot
from .conf import practice_setting
from .exceptions import (
    ConflictError,
    FatalInvariantError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .models import KeystrokeResult, PracticeSession, UserStatistics

logger = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_uppercase


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    metrics: SessionMetrics
    statistics: StatisticsSnapshot

    def as_dict(self) -> dict:
        out = {"session_id": self.session_id}
        out.update(self.metrics.as_dict())
        out["statistics"] = self.statistics.as_fields()
        return out


def generate_target_sequence(length: Optional[int] = None) -> str:
    """Uniform draw from A-Z with replacement; repeats are allowed."""
    if length is None:
        length = practice_setting("SEQUENCE_LENGTH")
    return "".join(random.choices(KEY_ALPHABET, k=length))


def create_statistics_for(owner_id) -> UserStatistics:
    """Provision the zeroed aggregate row that every user must own."""
    stats, created = UserStatistics.objects.get_or_create(owner_id=owner_id)
    if created:
        logger.debug("created statistics row for user %s", owner_id)
    return stats


def _load_owned_session(session_id, caller_id, *, for_update: bool = False) -> PracticeSession:
    qs = PracticeSession.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        session = qs.get(pk=session_id)
    except (PracticeSession.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("session not found")
    if session.owner_id != caller_id:
        logger.warning("user %s denied access to session %s", caller_id, session_id)
        raise ForbiddenError("you do not have permission to access this session")
    return session


def _require_active(session: PracticeSession) -> None:
    if session.status != PracticeSession.IN_PROGRESS:
        raise InvalidStateError(f"session is not active (status={session.status})")


def start_session(owner_id) -> PracticeSession:
    """Open a new practice session for ``owner_id``.

    The existence check gives the friendly error; the partial unique
    constraint on (owner, status='in_progress') is what actually closes the
    race between two concurrent starts.
    """
    try:
        with transaction.atomic():
            if PracticeSession.objects.filter(owner_id=owner_id, status=PracticeSession.IN_PROGRESS).exists():
                raise ConflictError("active session exists")
            session = PracticeSession.objects.create(
                owner_id=owner_id,
                target_sequence=generate_target_sequence(),
                nominal_duration_seconds=practice_setting("NOMINAL_DURATION_SECONDS"),
            )
    except IntegrityError:
        # Lost the race against a concurrent start: re-read to confirm.
        if PracticeSession.objects.filter(owner_id=owner_id, status=PracticeSession.IN_PROGRESS).exists():
            logger.info("concurrent start rejected for user %s", owner_id)
            raise ConflictError("active session exists")
        raise

    logger.info("started session %s for user %s", session.id, owner_id)
    return session


def _clean_event(event: Mapping) -> dict:
    target_key = event.get("target_key")
    if not isinstance(target_key, str) or len(target_key) != 1:
        raise ValidationError("target_key must be a single character", field="target_key")

    pressed_key = event.get("pressed_key")
    if pressed_key is not None and (not isinstance(pressed_key, str) or len(pressed_key) != 1):
        raise ValidationError("pressed_key must be a single character", field="pressed_key")

    is_correct = event.get("is_correct")
    if not isinstance(is_correct, bool):
        raise ValidationError("is_correct must be a boolean", field="is_correct")

    rt = event.get("response_time_ms")
    if isinstance(rt, bool) or not isinstance(rt, int) or rt <= 0:
        raise ValidationError("response_time_ms must be a positive integer", field="response_time_ms")

    return {
        "target_key": target_key,
        "pressed_key": pressed_key,
        "is_correct": is_correct,
        "response_time_ms": rt,
    }


def record_keystroke(session_id, caller_id, event: Mapping) -> KeystrokeResult:
    """Append one keystroke result to an active session.

    ``is_correct`` is stored as the client asserted it; it is not derived
    from ``target_key``/``pressed_key``.
    """
    with transaction.atomic():
        session = _load_owned_session(session_id, caller_id, for_update=True)
        _require_active(session)
        fields = _clean_event(event)
        result = KeystrokeResult.objects.create(session=session, **fields)
    logger.debug("recorded keystroke %s on session %s", result.id, session.id)
    return result


def _fold_statistics(owner_id, metrics: SessionMetrics, now: dt.datetime) -> StatisticsSnapshot:
    try:
        row = UserStatistics.objects.select_for_update().get(owner_id=owner_id)
    except UserStatistics.DoesNotExist:
        raise FatalInvariantError(f"user {owner_id} has no statistics row")

    before = StatisticsSnapshot.from_row(row)
    after = aggregator.fold(before, metrics, now=now)

    # Compare-and-set on version: a concurrent fold makes this update miss.
    updated = UserStatistics.objects.filter(pk=row.pk, version=before.version).update(
        updated_at=now, **after.as_fields()
    )
    if updated != 1:
        raise ConflictError("statistics were updated concurrently; retry")
    return after


def end_session(session_id, caller_id) -> SessionSummary:
    """Close an active session and fold its metrics into the owner's aggregate.

    Runs as one transaction: the session is never left completed without
    its fold, and a session is folded at most once.
    """
    with transaction.atomic():
        session = _load_owned_session(session_id, caller_id, for_update=True)
        _require_active(session)

        results = list(session.results.order_by("recorded_at", "id"))
        metrics = aggregator.summarize_session(results, session.nominal_duration_seconds)

        now = timezone.now()
        updated = PracticeSession.objects.filter(
            pk=session.pk, status=PracticeSession.IN_PROGRESS
        ).update(status=PracticeSession.COMPLETED, ended_at=now)
        if updated != 1:
            raise InvalidStateError("session is not active")

        statistics = _fold_statistics(session.owner_id, metrics, now)

    logger.info(
        "completed session %s for user %s: keys=%d accuracy=%.2f kpm=%.2f",
        session.id, session.owner_id, metrics.total_key_presses, metrics.accuracy_percent, metrics.kpm,
    )
    return SessionSummary(session_id=str(session.id), metrics=metrics, statistics=statistics)


def get_session(session_id, caller_id) -> PracticeSession:
    session = _load_owned_session(session_id, caller_id)
    # Fresh instance with the ordered results attached.
    return PracticeSession.objects.prefetch_related("results").get(pk=session.pk)


def _clean_limit(limit) -> int:
    if limit is None or limit == "":
        return practice_setting("HISTORY_DEFAULT_LIMIT")
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise ValidationError("limit must be an integer", field="limit")
    max_limit = practice_setting("HISTORY_MAX_LIMIT")
    if value < 1 or value > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}", field="limit")
    return value


def get_history(caller_id, limit=None) -> List[PracticeSession]:
    """Newest-first sessions of ``caller_id`` with keystroke counts annotated."""
    limit = _clean_limit(limit)
    qs = (
        PracticeSession.objects.filter(owner_id=caller_id)
        .annotate(
            total_key_presses=Count("results"),
            correct_key_presses=Count("results", filter=Q(results__is_correct=True)),
        )
        .order_by("-started_at", "-id")
    )
    return list(qs[:limit])


def get_statistics(caller_id) -> UserStatistics:
    try:
        return UserStatistics.objects.get(owner_id=caller_id)
    except UserStatistics.DoesNotExist:
        raise NotFoundError("statistics not found")


def abandon_stale_sessions(older_than: Optional[dt.timedelta], *, now: Optional[dt.datetime] = None) -> int:
    """Demote ``in_progress`` sessions started before ``now - older_than``.

    ``older_than=None`` abandons every open session. The status filter makes
    this safe to run alongside ``end_session``: only one of them can move a
    given session out of ``in_progress``.
    """
    qs = PracticeSession.objects.filter(status=PracticeSession.IN_PROGRESS)
    if older_than is not None:
        cutoff = (now or timezone.now()) - older_than
        qs = qs.filter(started_at__lt=cutoff)
    count = qs.update(status=PracticeSession.ABANDONED)
    logger.info("abandoned %d stale session(s)", count)
    return count
