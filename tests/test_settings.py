"""Tests for Settings defaults and validators."""

import pytest
from pydantic import ValidationError


class TestDefaults:
    def test_retry_and_pacing_defaults(self, tmp_path):
        from config.settings import Settings
        s = Settings(snapshot_db_path=tmp_path / "p.db", log_dir=tmp_path / "logs")
        assert s.retry_max_retries == 5
        assert s.retry_initial_delay == 61.0
        assert s.retry_jitter == 1.0
        assert s.edit_debounce_seconds == 1.0
        assert s.batch_pacing_seconds == 1.5
        assert s.batch_target_word_count == 5000
        assert s.translation_chunk_size == 3

    def test_archive_prefixes(self, settings):
        assert settings.archive_key_prefix == "bookforge-projects-archive"
        assert settings.authors_key_prefix == "bookforge-authors-archive"
        assert settings.snapshot_max_bytes == 5 * 1024 * 1024


class TestValidators:
    def test_negative_max_retries_rejected(self, tmp_path):
        from config.settings import Settings
        with pytest.raises(ValidationError):
            Settings(log_dir=tmp_path / "logs", retry_max_retries=-1)

    def test_zero_retries_allowed(self, tmp_path):
        from config.settings import Settings
        s = Settings(log_dir=tmp_path / "logs", retry_max_retries=0)
        assert s.retry_max_retries == 0

    def test_non_positive_initial_delay_rejected(self, tmp_path):
        from config.settings import Settings
        with pytest.raises(ValidationError):
            Settings(log_dir=tmp_path / "logs", retry_initial_delay=0)

    def test_negative_pacing_rejected(self, tmp_path):
        from config.settings import Settings
        with pytest.raises(ValidationError):
            Settings(log_dir=tmp_path / "logs", batch_pacing_seconds=-0.5)

    def test_zero_chunk_size_rejected(self, tmp_path):
        from config.settings import Settings
        with pytest.raises(ValidationError):
            Settings(log_dir=tmp_path / "logs", translation_chunk_size=0)

    def test_blank_user_id_rejected(self, tmp_path):
        from config.settings import Settings
        with pytest.raises(ValidationError):
            Settings(log_dir=tmp_path / "logs", user_id="   ")

    def test_parent_dirs_created(self, tmp_path):
        from config.settings import Settings
        db_path = tmp_path / "nested" / "deeper" / "projects.db"
        Settings(snapshot_db_path=db_path, log_dir=tmp_path / "logs")
        assert db_path.parent.is_dir()


class TestGetSettings:
    def test_cached_instance(self, monkeypatch, tmp_path):
        import config.settings as settings_module
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(settings_module, "_settings_instance", None)
        first = settings_module.get_settings()
        assert settings_module.get_settings() is first
