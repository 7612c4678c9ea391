import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..validators.config_validators import to_lowercase, to_path_set, to_uppercase

DEFAULT_FORMAT = (
    '{"time":"${time_rfc3339_nano}","id":"${id}","remote_ip":"${remote_ip}",'
    '"host":"${host}","method":"${method}","uri":"${uri}","user_agent":"${user_agent}",'
    '"status":${status},"error":${error},"latency":${latency},"latency_human":"${latency_human}"'
    ',"bytes_in":${bytes_in},"bytes_out":${bytes_out}}' + "\n"
)

# strftime layout used by ${time_custom}
DEFAULT_CUSTOM_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class Settings(BaseSettings):
    """
    Access-log settings loaded from the environment (ACCESSLOG_* variables).
    """

    FORMAT: str = DEFAULT_FORMAT
    CUSTOM_TIME_FORMAT: str = DEFAULT_CUSTOM_TIME_FORMAT

    # Comma-separated list or JSON list of paths that produce no log line.
    SKIP: str = ""

    # Max bytes of response body kept for ${response}; None keeps everything.
    CAPTURE_LIMIT: int | None = None

    # Diagnostics of the library itself (dropped lines, sink failures).
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    LOG_FORMAT: Literal["json", "text"] = "json"

    @property
    def SKIP_PATHS(self) -> frozenset[str]:
        return to_path_set(self.SKIP)

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before Literal validation, so
        ACCESSLOG_LOG_LEVEL=debug works the same as DEBUG.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    model_config = SettingsConfigDict(
        env_prefix="ACCESSLOG_",
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


class LoggerConfig(BaseModel):
    """
    Explicit access-log configuration, built once at startup and handed to
    the middleware / render pipeline.

    Fields:
      - format: the `${tag}` template string.
      - custom_time_format: strftime layout for ${time_custom}.
      - output: byte sink; anything with a `write()` method. Text streams are
        accepted too (lines are decoded as UTF-8 before writing).
      - skip: exact request paths that are never logged.
      - capture_limit: cap on captured response bytes, None for unbounded.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    format: str = DEFAULT_FORMAT
    custom_time_format: str = DEFAULT_CUSTOM_TIME_FORMAT
    output: Any = Field(default_factory=lambda: sys.stdout)
    skip: frozenset[str] = frozenset()
    capture_limit: int | None = Field(default=None, ge=0)

    @field_validator("format", mode="before")
    def default_format(cls, v: str | None) -> str:
        return v or DEFAULT_FORMAT

    @field_validator("output", mode="before")
    def default_output(cls, v: Any) -> Any:
        return sys.stdout if v is None else v

    @field_validator("skip", mode="before")
    def normalize_skip(cls, v: Any) -> frozenset[str]:
        return to_path_set(v)

    @classmethod
    def from_settings(cls, settings: Settings, output: Any = None) -> "LoggerConfig":
        return cls(
            format=settings.FORMAT,
            custom_time_format=settings.CUSTOM_TIME_FORMAT,
            output=output,
            skip=settings.SKIP_PATHS,
            capture_limit=settings.CAPTURE_LIMIT,
        )
