"""Tests for fontalike.config module."""

import logging

from fontalike.config import APP_HOME_ENV, Config, get_app_dir


class TestConfig:
    def test_defaults_written_on_first_run(self, tmp_path) -> None:
        config = Config(app_dir=tmp_path)
        assert config.config_file_path.exists()
        text = config.config_file_path.read_text()
        assert "[Matching]" in text
        assert "[Builder]" in text
        assert config.catalog_path == tmp_path / "font-features.json"
        assert config.progress_path == tmp_path / "font-features-progress.json"
        assert config.top_k == 5
        assert config.fallback_count == 5
        assert config.max_workers == 4
        assert config.fetch_timeout == 10.0
        assert config.delay_seconds == 0.08
        assert config.checkpoint_every == 50
        assert config.user_agent == "FontFeatureBuilder/1.0"
        assert config.log_level == logging.INFO

    def test_file_overrides_defaults(self, tmp_path) -> None:
        (tmp_path / "config.ini").write_text(
            "[Catalog]\ncatalog_filename = custom.json\n"
            "[Matching]\ntop_k = 8\nmax_workers = 0\n"
            "[Logging]\nlevel = debug\n",
            encoding="utf-8",
        )
        config = Config(app_dir=tmp_path)
        assert config.catalog_path == tmp_path / "custom.json"
        assert config.top_k == 8
        assert config.max_workers == 1
        assert config.fallback_count == 5
        assert config.log_level == logging.DEBUG

    def test_unknown_log_level(self, tmp_path) -> None:
        (tmp_path / "config.ini").write_text("[Logging]\nlevel = chatty\n", encoding="utf-8")
        assert Config(app_dir=tmp_path).log_level == logging.INFO

    def test_app_dir_from_environment(self, tmp_path, monkeypatch) -> None:
        home = tmp_path / "nested" / "home"
        monkeypatch.setenv(APP_HOME_ENV, str(home))
        assert get_app_dir() == home
        assert home.is_dir()
