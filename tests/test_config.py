import pytest
from pydantic import ValidationError

from grimarz.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "GRIMARZ_LOG_LEVEL",
            "GRIMARZ_VERIFY_TABLE_SIZES",
            "GRIMARZ_MAX_STRING_LENGTH",
        ):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.log_level == "WARNING"
        assert s.verify_table_sizes is False
        assert s.max_string_length is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GRIMARZ_VERIFY_TABLE_SIZES", "true")
        monkeypatch.setenv("GRIMARZ_MAX_STRING_LENGTH", "64")
        s = Settings(_env_file=None)
        assert s.verify_table_sizes is True
        assert s.max_string_length == 64

    def test_log_level_normalised(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError, match="Unknown log level"):
            Settings(log_level="chatty")

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            Settings(max_string_length=-1)
