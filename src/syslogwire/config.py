"""Configuration via pydantic-settings, 12-factor app style."""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from .codec.timestamp import YearResolver
from . import years


class Settings(BaseSettings):
    """syslogwire CLI configuration, loaded from env vars / .env file.

    The parsing core never reads these; the CLI turns them into explicit
    arguments.
    """

    default_format: Literal["auto", "rfc3164", "rfc5424"] = Field(
        default="auto", description="Wire format of input lines"
    )
    year_policy: Literal["rollback", "current", "fixed"] = Field(
        default="rollback", description="How RFC 3164 timestamps get their year"
    )
    fixed_year: int | None = Field(default=None, description="Year used by the 'fixed' policy")
    borrow_text: bool = Field(default=False, description="Parse into Span views instead of copies")
    log_level: str = Field(default="WARNING", description="Logging level for the CLI")

    class Config:
        env_prefix = "SYSLOGWIRE_"
        env_file = ".env"

    def year_strategy(self) -> YearResolver:
        if self.year_policy == "fixed":
            if self.fixed_year is None:
                raise ValueError("year_policy 'fixed' requires SYSLOGWIRE_FIXED_YEAR")
            return years.fixed_year(self.fixed_year)
        if self.year_policy == "current":
            return years.current_year()
        return years.rollback_future()


settings = Settings()
