# accounts/tests/test_auth_api.py
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework.test import APIClient

from accounts import services
from accounts.tokens import InvalidToken, issue_token, read_token
from practice.exceptions import ConflictError
from practice.models import UserStatistics

REGISTER = "/api/auth/register"
LOGIN = "/api/auth/login"
PROFILE = "/api/auth/profile"


def _register(c, username="johndoe", email="john@example.com", password="password123"):
    return c.post(REGISTER, {"username": username, "email": email, "password": password}, format="json")


@pytest.mark.django_db
def test_register_creates_user_statistics_and_token():
    c = APIClient()
    r = _register(c)
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["username"] == "johndoe"
    assert body["user"]["email"] == "john@example.com"
    assert "password" not in body["user"]
    assert body["token"]

    user = get_user_model().objects.get(username="johndoe")
    assert user.check_password("password123")
    stats = UserStatistics.objects.get(owner=user)
    assert stats.total_sessions == 0
    assert read_token(body["token"]) == user.pk


@pytest.mark.django_db
def test_register_duplicates_conflict():
    c = APIClient()
    assert _register(c).status_code == 201

    r = _register(c, username="other", email="JOHN@example.com")
    assert r.status_code == 409
    assert r.json()["field"] == "email"

    r = _register(c, email="new@example.com")
    assert r.status_code == 409
    assert r.json()["field"] == "username"
    assert get_user_model().objects.count() == 1


@pytest.mark.django_db
def test_store_rejects_duplicate_email_in_any_case(make_user):
    make_user("john")
    with pytest.raises(IntegrityError), transaction.atomic():
        get_user_model().objects.create_user(username="johnny", email="JOHN@example.com", password="x")


@pytest.mark.django_db
def test_concurrent_registration_with_same_email_is_a_conflict():
    services.register_user("first", "race@example.com", "password123")
    real_check = services._check_available
    calls = []

    def stale_check(username, email):
        # The first check runs before the competing insert became visible.
        calls.append(username)
        if len(calls) > 1:
            real_check(username, email)

    with mock.patch.object(services, "_check_available", side_effect=stale_check):
        with pytest.raises(ConflictError) as exc:
            services.register_user("second", "Race@example.com", "password123")
    assert exc.value.field == "email"
    assert len(calls) == 2
    assert list(get_user_model().objects.values_list("username", flat=True)) == ["first"]


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload",
    [
        {"username": "jo", "email": "jo@example.com", "password": "password123"},
        {"username": "johndoe", "email": "not-an-email", "password": "password123"},
        {"username": "johndoe", "email": "john@example.com", "password": "short"},
        {"email": "john@example.com", "password": "password123"},
    ],
)
def test_register_validation(payload):
    r = APIClient().post(REGISTER, payload, format="json")
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


@pytest.mark.django_db
def test_login_and_profile():
    c = APIClient()
    _register(c)

    bad = c.post(LOGIN, {"email": "john@example.com", "password": "wrong"}, format="json")
    assert bad.status_code == 401
    assert bad.json()["code"] == "authentication_failed"

    r = c.post(LOGIN, {"email": "John@Example.com", "password": "password123"}, format="json")
    assert r.status_code == 200
    token = r.json()["token"]

    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    profile = c.get(PROFILE).json()
    assert profile["username"] == "johndoe"
    assert profile["statistics"]["total_sessions"] == 0


@pytest.mark.django_db
def test_profile_requires_token():
    r = APIClient().get(PROFILE)
    assert r.status_code == 401


@pytest.mark.django_db
def test_expired_token_is_rejected(user, settings):
    token = issue_token(user)
    settings.AUTH_TOKEN_MAX_AGE = -1
    with pytest.raises(InvalidToken):
        read_token(token)

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    r = c.get(PROFILE)
    assert r.status_code == 401
    assert r.json()["detail"] == "token expired"


@pytest.mark.django_db
def test_tampered_token_is_rejected(user):
    token = issue_token(user)
    with pytest.raises(InvalidToken):
        read_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))


@pytest.mark.django_db
def test_token_for_deleted_user_is_rejected(make_user):
    u = make_user("ghost")
    token = issue_token(u)
    u.delete()
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    assert c.get(PROFILE).status_code == 401
