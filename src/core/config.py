"""Configuration models and YAML loader for the lead generator."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator


class BrowserConfig(BaseModel):
    """Browser session configuration."""

    cookies_path: str = "config/linkedin_cookies.json"
    timeout_ms: int = Field(default=30000, ge=1000)
    headless: bool = False


class LinkedInConfig(BaseModel):
    """Credentials used when the cookie session is not already authenticated.

    Values default to the LINKEDIN_EMAIL / LINKEDIN_PASSWORD environment
    variables so they never have to live in the YAML file.
    """

    email: str = Field(default_factory=lambda: os.environ.get("LINKEDIN_EMAIL", ""))
    password: str = Field(default_factory=lambda: os.environ.get("LINKEDIN_PASSWORD", ""))

    @property
    def has_credentials(self) -> bool:
        return bool(self.email and self.password)


class PipelineConfig(BaseModel):
    """Randomized delays inserted between browser requests."""

    page_delay_min: float = Field(default=2.0, ge=0.0)
    page_delay_max: float = Field(default=4.0, ge=0.0)
    detail_delay_min: float = Field(default=1.0, ge=0.0)
    detail_delay_max: float = Field(default=3.0, ge=0.0)

    @model_validator(mode="after")
    def max_not_below_min(self) -> "PipelineConfig":
        if self.page_delay_max < self.page_delay_min:
            msg = "page_delay_max must be >= page_delay_min"
            raise ValueError(msg)
        if self.detail_delay_max < self.detail_delay_min:
            msg = "detail_delay_max must be >= detail_delay_min"
            raise ValueError(msg)
        return self


class QueueConfig(BaseModel):
    """Dispatcher settings: attempts, hard timeout and polling cadence."""

    max_attempts: int = Field(default=1, ge=1, le=10)
    job_timeout_s: float = Field(default=30 * 60, gt=0)
    poll_interval_s: float = Field(default=2.0, gt=0)


class ExportConfig(BaseModel):
    """Where qualifying leads are exported once a job finishes."""

    sink: Literal["sheets", "csv"] = "sheets"
    service_account_path: str = "config/service_account.json"
    sheet_name: str = "Leads"
    share_with: list[str] = Field(default_factory=list)
    csv_dir: str = "data/exports"


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/leads.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    linkedin: LinkedInConfig = Field(default_factory=LinkedInConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def load(cls, path: str | Path) -> "Settings":
        """Like from_yaml, but a missing file yields the defaults."""
        if not Path(path).exists():
            return cls()
        return cls.from_yaml(path)
