# accounts/tokens.py
"""
Signed bearer tokens.

A token is ``django.core.signing.dumps({"uid": ..., "email": ...})`` with a
dedicated salt; the embedded timestamp gives it a max age
(``settings.AUTH_TOKEN_MAX_AGE``). Passwords themselves go through Django's
configured password hashers (``User.set_password`` / ``check_password``).
"""
from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core import signing

TOKEN_SALT = "accounts.bearer-token"


class InvalidToken(Exception):
    pass


def issue_token(user) -> str:
    return signing.dumps({"uid": user.pk, "email": user.email}, salt=TOKEN_SALT)


def read_token(token: str, max_age: Optional[int] = None) -> int:
    """Return the user id carried by ``token`` or raise ``InvalidToken``."""
    if max_age is None:
        max_age = settings.AUTH_TOKEN_MAX_AGE
    try:
        payload = signing.loads(token, salt=TOKEN_SALT, max_age=max_age)
    except signing.SignatureExpired:
        raise InvalidToken("token expired")
    except signing.BadSignature:
        raise InvalidToken("invalid token")

    uid = payload.get("uid") if isinstance(payload, dict) else None
    if uid is None:
        raise InvalidToken("invalid token")
    return uid
