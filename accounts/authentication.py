from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from .tokens import InvalidToken, read_token


class BearerTokenAuthentication(BaseAuthentication):
    """``Authorization: Bearer <token>`` with tokens from ``accounts.tokens``."""

    keyword = "Bearer"

    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if not parts or parts[0].lower() != self.keyword.lower().encode():
            return None
        if len(parts) != 2:
            raise AuthenticationFailed("Invalid authorization header.")

        try:
            token = parts[1].decode()
        except UnicodeError:
            raise AuthenticationFailed("Invalid authorization header.")

        try:
            user_id = read_token(token)
        except InvalidToken as e:
            raise AuthenticationFailed(str(e))

        User = get_user_model()
        try:
            user = User.objects.get(pk=user_id, is_active=True)
        except User.DoesNotExist:
            raise AuthenticationFailed("user not found")
        return (user, token)

    def authenticate_header(self, request):
        return self.keyword
