from django.conf import settings

DEFAULTS = {
    "SEQUENCE_LENGTH": 200,
    "NOMINAL_DURATION_SECONDS": 60,
    "HISTORY_DEFAULT_LIMIT": 10,
    "HISTORY_MAX_LIMIT": 100,
    "STALE_SESSION_MINUTES": 60,
}


def practice_setting(name: str):
    """Read a value from ``settings.PRACTICE``, falling back to the app default."""
    if name not in DEFAULTS:
        raise KeyError(f"unknown practice setting: {name}")
    overrides = getattr(settings, "PRACTICE", None) or {}
    return overrides.get(name, DEFAULTS[name])
