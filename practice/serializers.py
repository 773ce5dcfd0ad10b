# practice/serializers.py
import datetime as dt

from django.utils import timezone
from rest_framework import serializers

from .models import KeystrokeResult, PracticeSession, UserStatistics


class AwareDateTimeField(serializers.DateTimeField):
    """
    Datetime field that always emits tz-aware UTC ISO strings.
    Naive values coming from the store are assumed to be UTC.
    """
    def to_representation(self, value):
        if value is None:
            return None
        if timezone.is_naive(value):
            value = timezone.make_aware(value, dt.timezone.utc)
        return super().to_representation(value.astimezone(dt.timezone.utc))


class SingleCharField(serializers.CharField):
    def __init__(self, **kwargs):
        kwargs.setdefault("min_length", 1)
        kwargs.setdefault("max_length", 1)
        kwargs.setdefault("trim_whitespace", False)
        super().__init__(**kwargs)


class StrictBooleanField(serializers.BooleanField):
    """Only JSON ``true``/``false``; no "yes", 1 or "true" coercion."""
    def to_internal_value(self, data):
        if not isinstance(data, bool):
            self.fail("invalid", input=data)
        return data


class StrictIntegerField(serializers.IntegerField):
    """Only JSON integers; strings and floats such as "250" or 250.0 are rejected."""
    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, int):
            self.fail("invalid")
        return super().to_internal_value(data)


class KeystrokeCreateSerializer(serializers.Serializer):
    """
    Request body for POST /api/sessions/<id>/keypress.
    Notes:
      - pressed_key may be omitted or null to record a timeout/skip.
      - is_correct is taken as sent; the server does not compare keys.
    """
    target_key = SingleCharField()
    pressed_key = SingleCharField(required=False, allow_null=True, default=None)
    is_correct = StrictBooleanField()
    response_time_ms = StrictIntegerField(min_value=1)


class KeystrokeResultSerializer(serializers.ModelSerializer):
    recorded_at = AwareDateTimeField(read_only=True)

    class Meta:
        model = KeystrokeResult
        fields = (
            "id",
            "target_key",
            "pressed_key",
            "is_correct",
            "response_time_ms",
            "recorded_at",
        )
        read_only_fields = fields


class PracticeSessionSerializer(serializers.ModelSerializer):
    """Session snapshot; ``target_sequence`` is returned as a list of keys."""
    target_sequence = serializers.SerializerMethodField()
    started_at = AwareDateTimeField(read_only=True)
    ended_at = AwareDateTimeField(read_only=True)

    class Meta:
        model = PracticeSession
        fields = (
            "id",
            "status",
            "target_sequence",
            "nominal_duration_seconds",
            "started_at",
            "ended_at",
        )
        read_only_fields = fields

    def get_target_sequence(self, obj):
        return obj.keys


class PracticeSessionDetailSerializer(PracticeSessionSerializer):
    results = KeystrokeResultSerializer(many=True, read_only=True)

    class Meta(PracticeSessionSerializer.Meta):
        fields = PracticeSessionSerializer.Meta.fields + ("results",)
        read_only_fields = fields


class SessionHistorySerializer(serializers.ModelSerializer):
    """History row; expects the queryset annotations from ``services.get_history``."""
    started_at = AwareDateTimeField(read_only=True)
    ended_at = AwareDateTimeField(read_only=True)
    total_key_presses = serializers.IntegerField(read_only=True)
    correct_key_presses = serializers.IntegerField(read_only=True)

    class Meta:
        model = PracticeSession
        fields = (
            "id",
            "status",
            "nominal_duration_seconds",
            "started_at",
            "ended_at",
            "total_key_presses",
            "correct_key_presses",
        )
        read_only_fields = fields


class UserStatisticsSerializer(serializers.ModelSerializer):
    last_session_at = AwareDateTimeField(read_only=True)
    updated_at = AwareDateTimeField(read_only=True)

    class Meta:
        model = UserStatistics
        fields = (
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
            "updated_at",
        )
        read_only_fields = fields


class SessionSummarySerializer(serializers.Serializer):
    session_id = serializers.CharField()
    total_key_presses = serializers.IntegerField()
    correct_key_presses = serializers.IntegerField()
    accuracy_percent = serializers.FloatField()
    kpm = serializers.FloatField()
    average_response_time_ms = serializers.FloatField()
    statistics = serializers.SerializerMethodField()

    def get_statistics(self, obj):
        stats = dict(obj["statistics"])
        stats.pop("version", None)
        last = stats.get("last_session_at")
        if last is not None:
            stats["last_session_at"] = AwareDateTimeField().to_representation(last)
        return stats
