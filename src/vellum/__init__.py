"""
Vellum - static HTML renderer for archived chat exports.

Turns a directory tree of per-server, per-channel chunked message logs
into one index page per server and paginated pages per channel.
"""

__version__ = "0.1.0"

from .config import Config
from .pipeline import Pipeline, RunReport

__all__ = ["Config", "Pipeline", "RunReport"]
