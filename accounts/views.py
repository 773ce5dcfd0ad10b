# accounts/views.py
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from practice.serializers import UserStatisticsSerializer

from . import services
from .serializers import LoginSerializer, RegisterSerializer, UserSerializer


class RegisterView(APIView):
    """POST /api/auth/register (409 when the email or username is taken)."""
    permission_classes = [AllowAny]

    def post(self, request):
        ser = RegisterSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        user, token = services.register_user(**ser.validated_data)
        return Response({"token": token, "user": UserSerializer(user).data}, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """POST /api/auth/login"""
    permission_classes = [AllowAny]

    def post(self, request):
        ser = LoginSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        user, token = services.login_user(**ser.validated_data)
        return Response({"token": token, "user": UserSerializer(user).data}, status=status.HTTP_200_OK)


class ProfileView(APIView):
    """GET /api/auth/profile -> the caller plus their lifetime statistics."""
    def get(self, request):
        user, stats = services.get_profile(request.user.pk)
        body = UserSerializer(user).data
        body["statistics"] = UserStatisticsSerializer(stats).data if stats is not None else None
        return Response(body, status=status.HTTP_200_OK)
