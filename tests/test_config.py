"""Tests for settings validation."""
import pytest

from leetlog.config import JournalSettings, LeetCodeSettings, Settings


def test_default_settings_are_valid() -> None:
    settings = Settings()
    settings.validate()
    assert settings.journal.log_fetch_limit >= settings.journal.log_retain_limit


@pytest.mark.parametrize(
    "journal,message",
    [
        (JournalSettings(log_fetch_limit=0, log_retain_limit=0), "LOG_FETCH_LIMIT"),
        (JournalSettings(log_fetch_limit=20, log_retain_limit=0), "LOG_RETAIN_LIMIT must be positive"),
        (JournalSettings(log_fetch_limit=5, log_retain_limit=10), "cannot be greater"),
        (JournalSettings(snapshot_retries=0), "SNAPSHOT_RETRIES"),
    ],
)
def test_invalid_journal_settings(journal, message) -> None:
    with pytest.raises(ValueError, match=message):
        Settings(journal=journal).validate()


def test_invalid_timeout() -> None:
    with pytest.raises(ValueError, match="LEETCODE_TIMEOUT"):
        Settings(leetcode=LeetCodeSettings(timeout=0)).validate()
