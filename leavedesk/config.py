"""Application settings and logging setup."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from leavedesk.services.conflicts import ConflictPolicy


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEAVEDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    manager_email: str = "manager@example.com"

    email_user: str | None = None
    email_password: str | None = None
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 465

    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = "gpt-4o-mini"

    # Comma-separated ("Management,Helpdesk") or a JSON list.
    exempt_departments: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["Management"]
    )
    seed_demo_data: bool = True
    log_level: str = "INFO"

    @field_validator("exempt_departments", mode="before")
    @classmethod
    def _split_departments(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return [part.strip() for part in text.split(",") if part.strip()]

    def conflict_policy(self) -> ConflictPolicy:
        return ConflictPolicy(exempt_departments=frozenset(self.exempt_departments))


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
