"""Environment-backed configuration."""

from .config import Config

__all__ = ["Config"]
