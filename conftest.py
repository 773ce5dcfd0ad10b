import pytest
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _fast_password_hashing(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def make_user(db):
    """Create a user with its statistics row, as registration does."""
    from django.contrib.auth import get_user_model

    from practice.services import create_statistics_for

    counter = {"n": 0}

    def _make(username=None, with_statistics=True):
        counter["n"] += 1
        username = username or f"typist{counter['n']}"
        user = get_user_model().objects.create_user(
            username=username, email=f"{username}@example.com", password="secret123"
        )
        if with_statistics:
            create_statistics_for(user.pk)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user("alice")


@pytest.fixture
def other_user(make_user):
    return make_user("bob")


@pytest.fixture
def client_for():
    from accounts.tokens import issue_token

    def _client(u):
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(u)}")
        return c

    return _client
