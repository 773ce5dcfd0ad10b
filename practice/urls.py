from django.urls import path
from .views import (
    KeystrokeCreateView,
    SessionDetailView,
    SessionEndView,
    SessionHistoryView,
    SessionStartView,
    StatisticsView,
)

urlpatterns = [
    path("sessions", SessionHistoryView.as_view(), name="session-history"),
    path("sessions/start", SessionStartView.as_view(), name="session-start"),
    path("sessions/<uuid:session_id>", SessionDetailView.as_view(), name="session-detail"),
    path("sessions/<uuid:session_id>/keypress", KeystrokeCreateView.as_view(), name="session-keypress"),
    path("sessions/<uuid:session_id>/end", SessionEndView.as_view(), name="session-end"),
    path("statistics", StatisticsView.as_view(), name="statistics"),
]
