"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from src.core.config import (
    BrowserConfig,
    DatabaseConfig,
    ExportConfig,
    LinkedInConfig,
    PipelineConfig,
    QueueConfig,
    Settings,
)


class TestPipelineConfig:
    def test_defaults(self) -> None:
        c = PipelineConfig()
        assert (c.page_delay_min, c.page_delay_max) == (2.0, 4.0)
        assert (c.detail_delay_min, c.detail_delay_max) == (1.0, 3.0)

    def test_max_below_min_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig(page_delay_min=5.0, page_delay_max=1.0)
        with pytest.raises(ValidationError):
            PipelineConfig(detail_delay_min=2.0, detail_delay_max=0.5)

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig(page_delay_min=-1.0)


class TestQueueConfig:
    def test_defaults(self) -> None:
        c = QueueConfig()
        assert c.max_attempts == 1
        assert c.job_timeout_s == 1800
        assert c.poll_interval_s == 2.0

    def test_bounds(self) -> None:
        with pytest.raises(ValidationError):
            QueueConfig(max_attempts=0)
        with pytest.raises(ValidationError):
            QueueConfig(job_timeout_s=0)


class TestLinkedInConfig:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LINKEDIN_EMAIL", "me@example.com")
        monkeypatch.setenv("LINKEDIN_PASSWORD", "secret")
        c = LinkedInConfig()
        assert c.email == "me@example.com"
        assert c.has_credentials is True

    def test_no_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LINKEDIN_EMAIL", raising=False)
        monkeypatch.delenv("LINKEDIN_PASSWORD", raising=False)
        assert LinkedInConfig().has_credentials is False

    def test_password_alone_is_not_enough(self) -> None:
        assert LinkedInConfig(email="", password="secret").has_credentials is False


class TestExportConfig:
    def test_defaults(self) -> None:
        c = ExportConfig()
        assert c.sink == "sheets"
        assert c.share_with == []

    def test_unknown_sink_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ExportConfig(sink="excel")  # type: ignore[arg-type]


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.database == DatabaseConfig()
        assert s.browser == BrowserConfig()
        assert s.database.path == "data/leads.db"

    def test_from_yaml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "settings.yaml"
        cfg.write_text(dedent("""\
            database:
              path: /tmp/leads.db
            browser:
              headless: true
            queue:
              max_attempts: 3
              job_timeout_s: 600
            export:
              sink: csv
              csv_dir: /tmp/exports
        """))
        s = Settings.from_yaml(cfg)
        assert s.database.path == "/tmp/leads.db"
        assert s.browser.headless is True
        assert s.queue.max_attempts == 3
        assert s.queue.job_timeout_s == 600
        assert s.export.sink == "csv"
        assert s.pipeline == PipelineConfig()

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        cfg = tmp_path / "settings.yaml"
        cfg.write_text("")
        assert Settings.from_yaml(cfg).queue == QueueConfig()

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_load_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        s = Settings.load(tmp_path / "nope.yaml")
        assert s.export.sink == "sheets"

    def test_invalid_values_rejected(self, tmp_path: Path) -> None:
        cfg = tmp_path / "settings.yaml"
        cfg.write_text("browser:\n  timeout_ms: 10\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(cfg)
