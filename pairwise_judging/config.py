"""
Configuration for the store and the judging assistant.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigurationError
from .storage.visibility import MIN_VISIBLE_PARTICIPANTS

PLACEHOLDER_API_KEY = "pplx-your-key-here"
DEFAULT_API_URL = "https://api.perplexity.ai"
DEFAULT_MODEL = "sonar"


@dataclass
class StoreConfig:
    """Where the shared store lives and how much of it is shown."""

    data_dir: Path
    seed_path: Path | None = None
    min_visible: int = MIN_VISIBLE_PARTICIPANTS

    def __post_init__(self):
        """Validate configuration."""
        self.data_dir = Path(self.data_dir)
        if self.seed_path is not None:
            self.seed_path = Path(self.seed_path)
        if self.min_visible < 0:
            raise ValueError(f"min_visible must be non-negative, got {self.min_visible}")


@dataclass
class AssistantConfig:
    """Connection settings for the chat-completion service."""

    api_key: str
    base_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    timeout: float = 60.0  # seconds per request

    def __post_init__(self):
        """Validate configuration."""
        if not self.api_key or self.api_key == PLACEHOLDER_API_KEY:
            raise ConfigurationError("PERPLEXITY_API_KEY not configured")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "AssistantConfig":
        """Read settings from the environment."""
        timeout_raw = os.environ.get("PAIRWISE_JUDGING_TIMEOUT", "60")
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ConfigurationError(f"PAIRWISE_JUDGING_TIMEOUT must be a number, got {timeout_raw!r}") from e

        return cls(
            api_key=os.environ.get("PERPLEXITY_API_KEY", ""),
            base_url=os.environ.get("PAIRWISE_JUDGING_API_URL", DEFAULT_API_URL),
            model=os.environ.get("PAIRWISE_JUDGING_MODEL", DEFAULT_MODEL),
            timeout=timeout,
        )
