import pytest

from grantcore import AccessControl
from grantcore.config import testing


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    # Settings must not pick up values from the developer's environment
    for name in (
        "GRANTCORE_ENV",
        "GRANTCORE_DEBUG",
        "GRANTCORE_LOG_LEVEL",
        "GRANTCORE_LOG_JSON_FORMAT",
        "GRANTCORE_OWN_FALLBACK_TO_ANY",
        "GRANTCORE_DEFAULT_POSSESSION",
        "GRANTCORE_LOCK_ON_LOAD",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def settings():
    """Quiet settings for engine tests."""
    return testing.TestingSettings()


@pytest.fixture
def grants():
    """Nested grants for the admin/user/video scenario."""
    return {
        "admin": {
            "$extend": ["user"],
            "video": {
                "create:any": ["*"],
                "read:any": ["*"],
                "update:any": ["*"],
                "delete:any": ["*"],
            },
        },
        "user": {
            "video": {
                "create:own": ["*"],
                "read:own": ["*"],
                "update:own": ["title", "body"],
                "delete:own": ["*"],
            },
        },
    }


@pytest.fixture
def ac(grants, settings):
    """AccessControl loaded with the scenario grants."""
    return AccessControl(grants, settings=settings)


@pytest.fixture
def empty_ac(settings):
    return AccessControl(settings=settings)
