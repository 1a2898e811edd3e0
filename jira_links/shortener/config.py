"""Configuration for the Bitly shortener."""

import os
from typing import Optional

DEFAULT_API_URL = "https://api-ssl.bitly.com/v4"


class BitlyConfig:
    """Configuration class for Bitly API integration."""

    def __init__(self) -> None:
        """Initialize Bitly configuration from environment variables."""
        self.token: Optional[str] = os.getenv("BITLY_TOKEN")
        self.domain: str = os.getenv("BITLY_DOMAIN", "bit.ly")
        self.group_guid: Optional[str] = os.getenv("BITLY_GROUP_GUID")
        self.api_url: str = os.getenv("BITLY_API_URL", DEFAULT_API_URL)

    def is_configured(self) -> bool:
        """Check if Bitly is properly configured."""
        return self.token is not None

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        if not self.token:
            raise ValueError(
                "BITLY_TOKEN environment variable is required for link shortening"
            )
