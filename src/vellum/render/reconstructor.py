"""
Reconstructor: turns scanned chunk files into channel pages.

A single consumer drains the HandOff. Every chunk file is decoded,
reversed from newest-first to oldest-first, rendered to a fragment and
written as one page named after its channel and chunk number. A page
depends only on its own chunk file and the server's metadata, so the
arrival order of entries does not affect the output.

Failure scopes:
    - malformed chunk JSON or unreadable file: the file is skipped
    - unparseable message id: the page is not written, the file is
      recorded as failed
    - unparseable chunk number, render failure or write failure: the
      server is failed; remaining entries are drained unprocessed
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path, PurePath
from typing import Dict, List, Optional
from urllib.parse import quote

from markupsafe import Markup

from ..errors import ChunkFormatError, RecordDecodeError, VellumError
from ..model import Attachment, ChannelRecord, ServerRecord, parse_messages
from ..scanner import HandOff, ScannedEntry
from .channel_index import CHANNEL_METADATA, DATA_FILE_MARKER, SERVER_METADATA, page_name
from .fragments import render_messages
from .page_writer import CHANNEL_TEMPLATE, PageWriter

logger = logging.getLogger(__name__)


def chunk_number(filename: str) -> int:
    """Chunk number from the part of a filename before the first dot.

    Raises:
        ChunkFormatError: the leading component is not a non-negative integer.
    """
    head = filename.split('.', 1)[0]
    if not (head.isascii() and head.isdecimal()):
        raise ChunkFormatError(f"Invalid chunk file name: {filename!r}")
    return int(head)


@dataclass
class ServerContext:
    """Everything the consumer needs about one server; discarded afterwards."""
    server: ServerRecord
    server_dir: Path
    output_dir: Path
    channels: Dict[str, ChannelRecord]
    channel_links: Markup
    tz: Optional[tzinfo] = None

    def attachment_href(self, channel_key: str, attachment: Attachment) -> str:
        """Link from an output page to an archived attachment."""
        target = self.server_dir / channel_key / attachment.id / attachment.filename
        relative = os.path.relpath(os.path.abspath(target), os.path.abspath(self.output_dir))
        return quote(PurePath(relative).as_posix())


@dataclass
class ReconstructionResult:
    """Outcome of draining one server's hand-off."""
    pages: List[str] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    fatal: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.fatal is None and not self.failures


class Reconstructor:
    """Single consumer rendering every chunk file of one server."""

    def __init__(self, context: ServerContext, writer: PageWriter):
        self.context = context
        self.writer = writer

    def consume(self, handoff: HandOff) -> ReconstructionResult:
        """Drain ``handoff`` until it closes.

        Keeps reading after a server-level failure so that scanner workers
        blocked on a full hand-off can finish.
        """
        result = ReconstructionResult()
        for entry in handoff:
            if result.fatal is not None:
                continue
            try:
                self.handle(entry, result)
            except VellumError as e:
                logger.error(f"Server {self.context.server.id} failed at {entry.path}: {e}")
                result.fatal = e
            except Exception as e:
                logger.exception(f"Unexpected error processing {entry.path}")
                result.fatal = e
        return result

    def is_chunk_candidate(self, entry: ScannedEntry) -> bool:
        if entry.is_dir:
            return False
        if entry.name in (SERVER_METADATA, CHANNEL_METADATA):
            return False
        if DATA_FILE_MARKER not in entry.name:
            return False
        # chunks sit directly in a channel directory; deeper files are attachments
        return entry.path.parent.parent == self.context.server_dir

    def handle(self, entry: ScannedEntry, result: ReconstructionResult) -> None:
        if not self.is_chunk_candidate(entry):
            return

        chunk = chunk_number(entry.name)
        channel_key = entry.path.parent.name
        channel = self.context.channels.get(channel_key)
        if channel is None:
            logger.warning(f"No channel data for {channel_key}, skipping {entry.path}")
            result.skipped.append(entry.path)
            return

        logger.info(f"processing: {entry.path}...")
        try:
            messages = parse_messages(entry.path.read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError, RecordDecodeError) as e:
            logger.warning(f"Skipping malformed chunk {entry.path}: {e}")
            result.skipped.append(entry.path)
            return

        # disk order is newest-first
        messages.reverse()

        try:
            data = render_messages(
                messages,
                lambda attachment: self.context.attachment_href(channel_key, attachment),
                self.context.tz,
            )
        except ChunkFormatError as e:
            logger.error(f"Cannot render {entry.path}: {e}")
            result.failures.append(f"{entry.path}: {e}")
            return

        name = page_name(channel_key, chunk)
        fields = self.page_fields(channel, name, chunk, data)
        self.writer.write(name, fields, template=CHANNEL_TEMPLATE)
        result.pages.append(name)

    def page_fields(self, channel: ChannelRecord, name: str, chunk: int, data: Markup) -> Dict[str, object]:
        fields: Dict[str, object] = {}
        fields.update(self.context.server.fields())
        fields.update(channel.fields())
        fields["channels"] = self.context.channel_links
        fields["data"] = data
        fields["page_name"] = name
        fields["chunk"] = str(chunk)
        return fields
