# accounts/services.py
from __future__ import annotations

import logging
from typing import Tuple

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework.exceptions import AuthenticationFailed

from practice.exceptions import ConflictError, NotFoundError
from practice.models import UserStatistics
from practice.services import create_statistics_for

from .tokens import issue_token

logger = logging.getLogger(__name__)

User = get_user_model()


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _check_available(username: str, email: str) -> None:
    if User.objects.filter(email__iexact=email).exists():
        raise ConflictError("email already registered", field="email")
    if User.objects.filter(username=username).exists():
        raise ConflictError("username already taken", field="username")


def register_user(username: str, email: str, password: str) -> Tuple[object, str]:
    """Create a user together with its zeroed statistics row; return (user, token)."""
    email = _normalize_email(email)
    try:
        with transaction.atomic():
            _check_available(username, email)
            user = User.objects.create_user(username=username, email=email, password=password)
            create_statistics_for(user.pk)
    except IntegrityError:
        # Lost a race with a concurrent registration: the store constraints on
        # username and lower(email) rejected the insert.
        _check_available(username, email)
        raise

    logger.info("registered user %s (%s)", user.pk, username)
    return user, issue_token(user)


def login_user(email: str, password: str) -> Tuple[object, str]:
    user = User.objects.filter(email__iexact=_normalize_email(email), is_active=True).first()
    if user is None or not user.check_password(password):
        logger.warning("failed login for %s", email)
        raise AuthenticationFailed("Invalid email or password.")
    return user, issue_token(user)


def get_profile(user_id) -> Tuple[object, UserStatistics]:
    try:
        user = User.objects.select_related("typing_statistics").get(pk=user_id)
    except User.DoesNotExist:
        raise NotFoundError("user not found")
    try:
        stats = user.typing_statistics
    except UserStatistics.DoesNotExist:
        stats = None
    return user, stats
