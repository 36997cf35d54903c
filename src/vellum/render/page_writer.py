"""
PageWriter: template rendering, minification and page persistence.

Templates are compiled once per run with Jinja2. Rendered pages go
through minify-html when enabled; a minifier failure falls back to the
un-minified text. Each page is written to a temporary file beside its
target and moved into place, so readers never see a partial page.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping

import minify_html
from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError

from ..errors import PageWriteError, RenderError, TemplateLoadError

logger = logging.getLogger(__name__)

SERVER_TEMPLATE = "server"
CHANNEL_TEMPLATE = "channel"


class TemplateSet:
    """The server index and channel page templates."""

    def __init__(self, sources: Dict[str, str]):
        missing = {SERVER_TEMPLATE, CHANNEL_TEMPLATE} - set(sources)
        if missing:
            raise TemplateLoadError(f"Missing templates: {', '.join(sorted(missing))}")

        self.env = Environment(
            loader=DictLoader(sources),
            autoescape=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._templates = {}
        for name in sources:
            try:
                self._templates[name] = self.env.get_template(name)
            except TemplateError as e:
                raise TemplateLoadError(f"Template {name!r} does not compile: {e}") from e

    @classmethod
    def from_files(cls, server_path: Path, channel_path: Path) -> "TemplateSet":
        """Load both templates from disk.

        Raises:
            TemplateLoadError: a file is missing, unreadable or invalid.
        """
        sources = {}
        for name, path in ((SERVER_TEMPLATE, server_path), (CHANNEL_TEMPLATE, channel_path)):
            try:
                sources[name] = Path(path).read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise TemplateLoadError(f"Cannot read {name} template {path}: {e}") from e
        return cls(sources)

    def render(self, name: str, fields: Mapping[str, Any]) -> str:
        try:
            return self._templates[name].render(**fields)
        except TemplateError as e:
            raise RenderError(f"Rendering {name} template failed: {e}") from e


def minify(rendered: str) -> bytes:
    """Compact rendered HTML, falling back to the input on failure."""
    try:
        return minify_html.minify(rendered, minify_css=True, minify_js=True).encode('utf-8')
    except Exception as e:
        logger.warning(f"Minification failed, writing unminified page: {e}")
        return rendered.encode('utf-8')


class PageWriter:
    """Writes rendered pages into one server's output directory."""

    def __init__(self, templates: TemplateSet, output_dir: Path, minify_output: bool = True):
        self.templates = templates
        self.output_dir = Path(output_dir)
        self.minify_output = minify_output

    def page_path(self, page_name: str) -> Path:
        return self.output_dir / f"{page_name}.html"

    def write(self, page_name: str, fields: Mapping[str, Any],
              template: str = CHANNEL_TEMPLATE) -> Path:
        """Render ``fields`` and replace ``{output_dir}/{page_name}.html``.

        Raises:
            RenderError: the template could not be rendered.
            PageWriteError: the page could not be written.
        """
        rendered = self.templates.render(template, fields)
        if self.minify_output:
            payload = minify(rendered)
        else:
            payload = rendered.encode('utf-8')

        target = self.page_path(page_name)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                'wb', dir=self.output_dir, prefix=f".{page_name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PageWriteError(f"Cannot write {target}: {e}") from e

        logger.debug(f"Wrote {target} ({len(payload)} bytes)")
        return target
