import pytest

from app.core.config import Settings

DB_URL = "sqlite+aiosqlite:///:memory:"


def test_session_update_must_fit_inside_submission_budget():
    with pytest.raises(ValueError, match="SESSION_UPDATE_TIMEOUT_SECONDS"):
        Settings(
            DATABASE_URL=DB_URL,
            SUBMISSION_TIMEOUT_SECONDS=2.0,
            SESSION_UPDATE_TIMEOUT_SECONDS=2.0,
        )


def test_default_timeouts_are_consistent():
    configured = Settings(DATABASE_URL=DB_URL)
    assert configured.SESSION_UPDATE_TIMEOUT_SECONDS < configured.SUBMISSION_TIMEOUT_SECONDS


def test_log_level_is_normalised():
    assert Settings(DATABASE_URL=DB_URL, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
