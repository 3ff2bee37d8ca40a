"""Process settings loaded with pydantic-settings.

These are the knobs of the CLI shell, not the user's preferences: where the
preference file lives, which dispatch policy to run and how faults render.
Every field can be overridden with a ``CONDUCTOR_``-prefixed environment
variable or a ``.env`` file.

Examples:
    CONDUCTOR_PREFERENCES=/tmp/preferences.json
    CONDUCTOR_POLICY=simple
    CONDUCTOR_FANCY=true
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .dispatch import Policy


class Settings(BaseSettings):
    """Settings of the conductor CLI shell."""

    model_config = SettingsConfigDict(
        env_prefix="CONDUCTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    preferences: Path = Field(
        default=Path("~/.conductor/preferences.json"),
        description="JSON file holding the persisted preferences",
    )
    program: str = Field(default="conductor", min_length=1, description="Program name shown in banners")
    policy: Policy = Field(default=Policy.EXTENDED, description="Dispatch policy: 'extended' or 'simple'")
    numeric: bool | None = Field(
        default=None,
        description="Read '-3.5' as a value; None follows the policy",
    )

    # Presentation
    fancy: bool = False
    colorful: bool = True
    log_format: Literal["json", "console"] = "console"

    @field_validator("preferences", mode="after")
    @classmethod
    def expand_preferences(cls, v: Path) -> Path:
        """Expand ``~`` so the store never sees a literal tilde."""
        return v.expanduser()

    @field_validator("policy", mode="before")
    @classmethod
    def lower_policy(cls, v):
        """Accept ``SIMPLE`` as well as ``simple``."""
        return v.lower() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance.

    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    return Settings()


__all__ = (
    "Settings",
    "get_settings",
)
