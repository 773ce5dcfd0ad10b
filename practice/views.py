# practice/views.py
from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .serializers import (
    KeystrokeCreateSerializer,
    KeystrokeResultSerializer,
    PracticeSessionDetailSerializer,
    PracticeSessionSerializer,
    SessionHistorySerializer,
    SessionSummarySerializer,
    UserStatisticsSerializer,
)


class SessionStartView(APIView):
    """POST /api/sessions/start (409 while another session is in progress)."""
    def post(self, request):
        session = services.start_session(request.user.pk)
        return Response(PracticeSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class KeystrokeCreateView(APIView):
    """POST /api/sessions/{session_id}/keypress"""
    def post(self, request, session_id):
        ser = KeystrokeCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        result = services.record_keystroke(session_id, request.user.pk, ser.validated_data)
        return Response(KeystrokeResultSerializer(result).data, status=status.HTTP_201_CREATED)


class SessionEndView(APIView):
    """POST /api/sessions/{session_id}/end -> session metrics plus the updated aggregate."""
    def post(self, request, session_id):
        summary = services.end_session(session_id, request.user.pk)
        return Response(SessionSummarySerializer(summary.as_dict()).data, status=status.HTTP_200_OK)


class SessionDetailView(APIView):
    """GET /api/sessions/{session_id}"""
    def get(self, request, session_id):
        session = services.get_session(session_id, request.user.pk)
        return Response(PracticeSessionDetailSerializer(session).data, status=status.HTTP_200_OK)


class SessionHistoryView(APIView):
    """
    GET /api/sessions?limit=N
    Newest first; each row carries total/correct key press counts.
    """
    def get(self, request):
        sessions = services.get_history(request.user.pk, request.query_params.get("limit"))
        return Response(SessionHistorySerializer(sessions, many=True).data, status=status.HTTP_200_OK)


class StatisticsView(APIView):
    """GET /api/statistics"""
    def get(self, request):
        stats = services.get_statistics(request.user.pk)
        return Response(UserStatisticsSerializer(stats).data, status=status.HTTP_200_OK)
