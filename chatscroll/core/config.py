"""Tunable thresholds for the chat list, loaded with Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScrollSettings(BaseSettings):
    """Scroll and pagination policy.

    None of these are invariants; they were tuned by feel:

    - ``bottom_epsilon``: slack (in scroll units) still counted as "at bottom".
      Larger values make autoscroll stickier.
    - ``top_threshold``: offset below which older history is requested.
      Larger values start pagination earlier.
    - ``user_scroll_cooldown_ms``: quiet period after the last viewer scroll
      before the list counts the gesture as finished.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHATSCROLL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bottom_epsilon: float = Field(default=50, ge=0)
    top_threshold: float = Field(default=200, ge=0)
    user_scroll_cooldown_ms: int = Field(default=2000, ge=0)

    # The same two thresholds in terminal lines, for the Textual host.
    line_bottom_epsilon: float = Field(default=1, ge=0)
    line_top_threshold: float = Field(default=10, ge=0)

    # Annotation
    timestamp_gap_seconds: float = Field(default=300, ge=0)

    # Virtualization
    window_buffer: int = Field(default=40, ge=0)
    estimated_message_height: int = Field(default=3, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    @property
    def user_scroll_cooldown(self) -> float:
        """Cooldown in seconds, as the event loop wants it."""
        return self.user_scroll_cooldown_ms / 1000

    def in_lines(self) -> ScrollSettings:
        """Copy whose scroll thresholds are the line-based ones."""
        return self.model_copy(
            update={
                "bottom_epsilon": self.line_bottom_epsilon,
                "top_threshold": self.line_top_threshold,
            }
        )


@lru_cache
def get_settings() -> ScrollSettings:
    return ScrollSettings()
