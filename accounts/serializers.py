from django.contrib.auth import get_user_model
from rest_framework import serializers

from practice.serializers import AwareDateTimeField


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=30)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, max_length=128, write_only=True, trim_whitespace=False)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class UserSerializer(serializers.ModelSerializer):
    created_at = AwareDateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = get_user_model()
        fields = ("id", "username", "email", "created_at")
        read_only_fields = fields
