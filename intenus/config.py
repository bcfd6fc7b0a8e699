from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        env_prefix="INTENUS_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def model_post_init(self, __context: Any) -> None:
        """Keep the probability bounds ordered even when misconfigured."""

        super().model_post_init(__context)

        if self.execution_probability_floor > self.execution_probability_ceiling:
            object.__setattr__(
                self,
                "execution_probability_floor",
                self.execution_probability_ceiling,
            )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(
        default="INFO",
        description="Logging level",
        validation_alias=AliasChoices("INTENUS_LOG_LEVEL", "LOG_LEVEL"),
    )
    log_format: Literal["auto", "json", "console"] = Field(
        default="auto",
        description="Log renderer; auto is console at DEBUG and JSON otherwise",
    )

    # IGS document settings
    client_name: str = Field(default="Intenus AI Assistant", description="Client identifier written to intent metadata")
    client_version: str = Field(default="1.0.0", description="Client version written to intent metadata")
    client_platform: str = Field(default="web", description="Client platform written to intent metadata")
    original_input_language: str = Field(default="en", description="Language tag for the natural-language description")
    original_input_confidence: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Parser confidence recorded alongside the natural-language description",
    )
    range_output_cap: str = Field(
        default="99999999999999999",
        pattern=r"^[0-9]+$",
        max_length=78,
        description="Upper bound used for range output amounts (effectively unbounded)",
    )
    show_top_n: int = Field(default=3, ge=1, description="Number of solver solutions surfaced to the user")

    # Auto-revoke policy
    auto_revoke_minutes_per_hour: int = Field(
        default=30,
        ge=1,
        description="Deadline minutes that map to one hour of auto-revoke time",
    )
    auto_revoke_min_hours: int = Field(default=1, ge=0, description="Minimum auto-revoke time in hours")

    # Analysis heuristics
    solver_pool_base: int = Field(default=50, ge=1, description="Base eligible solver pool before requirements")
    solver_pool_floor: int = Field(default=3, ge=0, description="Minimum reported solver pool")
    execution_probability_base: int = Field(default=85, description="Base execution probability percentage")
    execution_probability_floor: int = Field(default=60, ge=0, le=100, description="Lowest reported execution probability")
    execution_probability_ceiling: int = Field(default=95, ge=0, le=100, description="Highest reported execution probability")

    # Market snapshot cache
    market_cache_ttl_seconds: int = Field(default=300, ge=1, description="TTL for cached market snapshots")
    market_cache_max_size: int = Field(default=1000, ge=1, description="Maximum number of cached market snapshots")


# Global settings instance
settings = Settings()
