"""Configuration management with environment variable support."""

import logging
import os
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}


class Config:
    """Centralized configuration management.

    Keyword overrides (``Config(workers=1)``) take precedence over the
    environment; ``None`` overrides are ignored.
    """

    def __init__(self, **overrides: Any):
        self._overrides = {k: v for k, v in overrides.items() if v is not None}

    def _get(self, name: str, env_var: str, default: Any) -> Any:
        if name in self._overrides:
            return self._overrides[name]
        return os.environ.get(env_var, default)

    @property
    def input_dir(self) -> Path:
        """Root directory holding one subtree per server."""
        return Path(self._get("input_dir", "VELLUM_INPUT_DIR", "."))

    @property
    def output_dir(self) -> Path:
        """Root directory receiving rendered pages."""
        return Path(self._get("output_dir", "VELLUM_OUTPUT_DIR", "out"))

    @property
    def server_template(self) -> Path:
        """Template source for server index pages."""
        return Path(self._get("server_template", "VELLUM_SERVER_TEMPLATE", "index.j2"))

    @property
    def channel_template(self) -> Path:
        """Template source for channel pages."""
        return Path(self._get("channel_template", "VELLUM_CHANNEL_TEMPLATE", "channel.j2"))

    @property
    def workers(self) -> int:
        """Directory enumeration threads; defaults to the CPU count."""
        default = os.cpu_count() or 1
        try:
            value = int(self._get("workers", "VELLUM_WORKERS", default))
        except (TypeError, ValueError):
            return default
        return value if value >= 1 else default

    @property
    def minify(self) -> bool:
        """Whether rendered pages go through the HTML minifier."""
        value = self._get("minify", "VELLUM_MINIFY", "true")
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() not in _FALSE_VALUES

    @property
    def timezone(self) -> Optional[ZoneInfo]:
        """Zone for rendered timestamps; None means local time."""
        name = self._get("timezone", "VELLUM_TIMEZONE", "")
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {name!r}, using local time")
            return None

    @property
    def log_level(self) -> str:
        """Application logging level."""
        return self._get("log_level", "VELLUM_LOG_LEVEL", "INFO")

    def validate(self) -> bool:
        """Check that both template sources exist."""
        return not self.get_missing_config()

    def get_missing_config(self) -> list[str]:
        """List template sources that are not present on disk."""
        return [
            str(path) for path in (self.server_template, self.channel_template)
            if not path.is_file()
        ]
