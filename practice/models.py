import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class PracticeSession(models.Model):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    STATUS_CHOICES = [
        (IN_PROGRESS, "In progress"),
        (COMPLETED, "Completed"),
        (ABANDONED, "Abandoned"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="practice_sessions"
    )
    target_sequence = models.TextField(editable=False)                     # Keys to press, one char each
    nominal_duration_seconds = models.PositiveIntegerField(default=60)     # Used for KPM, not wall clock
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=IN_PROGRESS)
    started_at = models.DateTimeField(auto_now_add=True, db_index=True)
    ended_at = models.DateTimeField(null=True, blank=True)                 # Set once, on completion

    class Meta:
        ordering = ["-started_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner"],
                condition=Q(status="in_progress"),
                name="uq_one_active_session_per_owner",
            ),
        ]
        indexes = [
            models.Index(fields=["owner", "status"], name="idx_owner_status"),
        ]

    def __str__(self):
        return f"PracticeSession({self.id}, {self.status})"

    @property
    def keys(self):
        return list(self.target_sequence)

    @property
    def is_active(self) -> bool:
        return self.status == self.IN_PROGRESS


class KeystrokeResult(models.Model):
    session = models.ForeignKey(PracticeSession, on_delete=models.CASCADE, related_name="results")
    target_key = models.CharField(max_length=1)
    pressed_key = models.CharField(max_length=1, null=True, blank=True)   # None means timeout/skip
    is_correct = models.BooleanField()                                     # Asserted by the client
    response_time_ms = models.PositiveIntegerField()
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["recorded_at", "id"]
        indexes = [
            models.Index(fields=["session", "recorded_at"], name="idx_session_recorded"),
        ]


class UserStatistics(models.Model):
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="typing_statistics"
    )
    total_sessions = models.PositiveIntegerField(default=0)
    total_key_presses = models.PositiveIntegerField(default=0)
    correct_key_presses = models.PositiveIntegerField(default=0)
    average_kpm = models.FloatField(default=0.0)
    best_kpm = models.FloatField(default=0.0)
    average_accuracy = models.FloatField(default=0.0)
    best_accuracy = models.FloatField(default=0.0)
    average_response_time_ms = models.FloatField(default=0.0)
    best_response_time_ms = models.FloatField(default=0.0)                 # 0 means never set
    last_session_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=0)                       # Bumped on every fold
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "user statistics"

    def __str__(self):
        return f"UserStatistics(owner={self.owner_id}, sessions={self.total_sessions})"
