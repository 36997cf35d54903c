"""
Integrated pipeline for rendering an archived chat export.

Servers are processed one at a time: (1) the channel index is built and
the server index page written, (2) scanner workers and a single
reconstruction thread run concurrently over the server's subtree,
(3) both are joined before the next server starts.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import Config
from .errors import RecordDecodeError, VellumError
from .model import ServerRecord, load_server_record
from .render import (
    ChannelIndexBuilder,
    PageWriter,
    ReconstructionResult,
    Reconstructor,
    ServerContext,
    TemplateSet,
)
from .render.channel_index import SERVER_METADATA
from .render.page_writer import SERVER_TEMPLATE
from .scanner import HandOff, TreeScanner

logger = logging.getLogger(__name__)


@dataclass
class ServerResult:
    """Outcome of rendering one server directory."""
    server_id: int
    pages: List[str] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class RunReport:
    """Summary of a complete run."""
    workers: int
    servers: List[ServerResult] = field(default_factory=list)
    skipped_servers: List[str] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def pages_written(self) -> int:
        return sum(len(s.pages) for s in self.servers)

    @property
    def failures(self) -> List[str]:
        return [failure for s in self.servers for failure in s.failures]

    @property
    def ok(self) -> bool:
        return not self.failures


def discover_server_dirs(input_dir: Path) -> List[Path]:
    """Numeric top-level directories, in ascending numeric order."""
    candidates = [
        p for p in Path(input_dir).iterdir()
        if p.is_dir() and p.name.isascii() and p.name.isdecimal()
    ]
    return sorted(candidates, key=lambda p: int(p.name))


class Pipeline:
    """Archive rendering pipeline."""

    def __init__(self, config: Optional[Config] = None, templates: Optional[TemplateSet] = None):
        """Initialize the pipeline.

        Args:
            config: Configuration object. If None, creates a new Config instance.
            templates: Preloaded templates. If None, loads the configured files.

        Raises:
            TemplateLoadError: a template is missing or does not compile.
        """
        self.config = config or Config()
        self.templates = templates or TemplateSet.from_files(
            self.config.server_template, self.config.channel_template
        )
        self.workers = self.config.workers
        self.index_builder = ChannelIndexBuilder()

    def run(self) -> RunReport:
        """Render every server directory under the input root."""
        started = time.perf_counter()
        report = RunReport(workers=self.workers)
        input_dir = self.config.input_dir
        output_root = self.config.output_dir
        output_root.mkdir(parents=True, exist_ok=True)

        for server_dir in discover_server_dirs(input_dir):
            server = self.load_server(server_dir)
            if server is None:
                report.skipped_servers.append(server_dir.name)
                continue
            result = self.process_server(server_dir, server)
            report.servers.append(result)
            if result.ok:
                logger.info(f"Server {server.id}: wrote {len(result.pages)} pages")
            else:
                logger.error(f"Server {server.id}: {len(result.failures)} failures")

        report.elapsed = time.perf_counter() - started
        logger.info(
            f"Run complete: {len(report.servers)} servers, {report.pages_written} pages, "
            f"{len(report.skipped_servers)} skipped, {len(report.failures)} failures"
        )
        return report

    def load_server(self, server_dir: Path) -> Optional[ServerRecord]:
        """Read server metadata, or None when the directory must be skipped."""
        metadata = server_dir / SERVER_METADATA
        if not metadata.is_file():
            logger.warning(f"does server.json exist for {server_dir.name}? skipping...")
            return None
        try:
            return load_server_record(metadata)
        except (OSError, RecordDecodeError) as e:
            logger.warning(f"Invalid server data for {metadata}, skipping: {e}")
            return None

    def process_server(self, server_dir: Path, server: ServerRecord) -> ServerResult:
        """Render the index page and every channel page of one server."""
        result = ServerResult(server_id=server.id)
        output_dir = self.config.output_dir / str(server.id)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            index = self.index_builder.build(server_dir)
            writer = PageWriter(self.templates, output_dir, minify_output=self.config.minify)

            links = index.render_links()
            index_fields = dict(server.fields())
            index_fields["channels"] = links
            writer.write("index", index_fields, template=SERVER_TEMPLATE)
            result.pages.append("index")
        except (OSError, VellumError) as e:
            logger.error(f"Cannot write index for server {server.id}: {e}")
            result.failures.append(f"{server_dir}: {e}")
            return result

        context = ServerContext(
            server=server,
            server_dir=server_dir,
            output_dir=output_dir,
            channels=index.channels,
            channel_links=links,
            tz=self.config.timezone,
        )
        reconstruction = self.reconstruct(context, writer)

        result.pages.extend(sorted(reconstruction.pages))
        result.skipped.extend(sorted(reconstruction.skipped))
        result.failures.extend(reconstruction.failures)
        if reconstruction.fatal is not None:
            result.failures.append(f"{server_dir}: {reconstruction.fatal}")
        return result

    def reconstruct(self, context: ServerContext, writer: PageWriter) -> ReconstructionResult:
        """Run the scanner and a reconstruction thread over one server."""
        handoff = HandOff()
        reconstructor = Reconstructor(context, writer)
        outcome: List[ReconstructionResult] = []

        consumer = threading.Thread(
            target=lambda: outcome.append(reconstructor.consume(handoff)),
            name=f"vellum-render-{context.server.id}",
        )
        consumer.start()
        try:
            TreeScanner(self.workers).scan(context.server_dir, handoff)
        finally:
            handoff.close()
            consumer.join()
        return outcome[0]
