from typing import Literal

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON", description="Write the log file as JSON lines")

    tick_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        validation_alias="WALK_TICK_INTERVAL_SECONDS",
        description="Interval between session clock ticks",
    )
    catch_up_policy: Literal["fast_forward", "clamp"] = Field(
        default="fast_forward",
        validation_alias="WALK_CATCH_UP_POLICY",
        description="How the phase clock absorbs long suspensions (app backgrounded)",
    )
    pre_warning_seconds: int = Field(
        default=10,
        ge=0,
        validation_alias="WALK_PRE_WARNING_SECONDS",
        description="Seconds before a phase boundary to announce the upcoming phase (0 disables)",
    )
    countdown_seconds: int = Field(
        default=3,
        ge=0,
        validation_alias="WALK_COUNTDOWN_SECONDS",
        description="Length of the spoken countdown before a phase boundary (0 disables)",
    )
    step_milestone_interval: int = Field(
        default=1000,
        ge=0,
        validation_alias="WALK_STEP_MILESTONE_INTERVAL",
        description="Announce every N steps walked during a session (0 disables)",
    )
    haptics_enabled: bool = Field(default=True, validation_alias="WALK_HAPTICS_ENABLED")
    voice_enabled: bool = Field(default=True, validation_alias="WALK_VOICE_ENABLED")

    food_estimation_url: str = Field(
        default="http://localhost:8000/food/estimate",
        validation_alias="FOOD_ESTIMATION_URL",
        description="Endpoint of the AI food estimation service",
    )
    food_estimation_api_key: str = Field(default="", validation_alias="FOOD_ESTIMATION_API_KEY")
    food_estimation_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="FOOD_ESTIMATION_TIMEOUT_SECONDS",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
