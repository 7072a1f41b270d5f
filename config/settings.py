"""
Centralized application settings

All configuration for the draft & publication core lives here. Values are
loaded from environment variables (and an optional ``.env`` file) and typed
through Pydantic so that a bad value fails fast at startup.
"""

from typing import Optional, Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from pathlib import Path


class DraftSettings(BaseSettings):
    """Draft editing / autosave settings"""

    autosave_enabled: bool = Field(default=True, description="Autosave valid, dirty drafts on every mutation")
    draft_id_suffix: str = Field(default="_draft", description="Suffix appended to a job id for drafts derived from it")
    default_salary_unit: str = Field(default="monthly", description="Salary unit of a freshly created draft")
    default_duration_unit: str = Field(default="days", description="Duration unit of a freshly created draft")
    max_tracked_states: int = Field(default=10000, gt=0, description="Draft lifecycle states a coordinator remembers before forgetting terminal ones")

    @field_validator("draft_id_suffix")
    @classmethod
    def validate_suffix(cls, v):
        if not v:
            raise ValueError("draft_id_suffix must not be empty")
        return v

    class Config:
        env_prefix = "DRAFT_"


class StoreSettings(BaseSettings):
    """Reference store adapter settings"""

    database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL used by the SQL-backed stores"
    )
    echo: bool = Field(default=False, description="SQLAlchemy SQL query logging")
    max_drafts: int = Field(default=1000, gt=0, description="Capacity of the in-memory draft store")

    class Config:
        env_prefix = "STORE_"


class LoggingSettings(BaseSettings):
    """Logging settings"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Selects the renderer (console vs JSON)"
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Log file path (None means stdout only)"
    )
    structured: bool = Field(default=True, description="Use the console renderer in development")

    class Config:
        env_prefix = "LOG_"


class Settings(BaseSettings):
    """Main settings class"""

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    project_name: str = Field(
        default="Job Draft Core",
        description="Project name"
    )
    version: str = Field(default="1.0.0", description="Version")

    # Sub-settings
    drafts: DraftSettings = DraftSettings()
    stores: StoreSettings = StoreSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def project_root(self) -> Path:
        """Project root directory"""
        return Path(__file__).parent.parent

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Return the shared settings instance"""
    return settings
