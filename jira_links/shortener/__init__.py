"""URL shortener clients used by the link annotator."""

from .base import Shortener, call_shortener
from .bitly import BitlyClient
from .config import BitlyConfig

__all__ = ["BitlyClient", "BitlyConfig", "Shortener", "call_shortener"]
