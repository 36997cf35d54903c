"""
Channel link list for a server's index and page navigation.

The shard count per channel is derived from how many entries in the
channel directory mention the data-file marker, not from the chunk
numbers the scanner finds later. Sparse or missing chunk files can
therefore produce index links with no page behind them, or pages with no
index link.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from markupsafe import Markup

from ..errors import RecordDecodeError
from ..model import ChannelRecord, load_channel_record

logger = logging.getLogger(__name__)

DATA_FILE_MARKER = "json"
SERVER_METADATA = "server.json"
CHANNEL_METADATA = "channel.json"

LINK_HTML = Markup('<a href="./{page}.html">{label}</a><br>\n')


def page_name(channel_id, chunk: int) -> str:
    """Page name for a chunk: ``{id}`` for chunk 0, ``{id}_{chunk}`` otherwise."""
    return f"{channel_id}" if chunk == 0 else f"{channel_id}_{chunk}"


def count_data_files(channel_dir: Path) -> int:
    """Count entries whose name contains the data-file marker.

    Includes the channel metadata file and the base chunk.
    """
    with os.scandir(channel_dir) as it:
        return sum(1 for entry in it if DATA_FILE_MARKER in entry.name)


def shard_labels(name: str, amount: int) -> List[str]:
    """Labels for the overflow pages of a channel with ``amount`` data files."""
    if amount < 3:
        return []
    return [f"{name}_{i}" for i in range(1, amount - 1)]


@dataclass(frozen=True)
class ChannelIndexEntry:
    """Ordered (page name, label) pairs for one channel."""
    channel_id: int
    pages: List[Tuple[str, str]]

    @classmethod
    def for_channel(cls, channel: ChannelRecord, amount: int) -> "ChannelIndexEntry":
        labels = [channel.name] + shard_labels(channel.name, amount)
        return cls(
            channel_id=channel.id,
            pages=[(page_name(channel.id, i), label) for i, label in enumerate(labels)],
        )


@dataclass
class ChannelIndex:
    """Channels of one server, keyed by directory name, plus their links."""
    channels: Dict[str, ChannelRecord] = field(default_factory=dict)
    entries: List[ChannelIndexEntry] = field(default_factory=list)

    def render_links(self) -> Markup:
        """HTML link list, one line per page."""
        return Markup("").join(
            LINK_HTML.format(page=page, label=label)
            for entry in self.entries
            for page, label in entry.pages
        )


class ChannelIndexBuilder:
    """Reads channel metadata and counts chunk files before a scan starts."""

    def build(self, server_dir: Path) -> ChannelIndex:
        """Build the channel index for one server directory.

        Channel directories without ``channel.json`` are ignored; ones with a
        malformed ``channel.json`` are skipped with a warning. Entries are
        ordered by channel id.
        """
        index = ChannelIndex()
        by_id: Dict[int, ChannelIndexEntry] = {}

        for channel_dir in sorted(p for p in server_dir.iterdir() if p.is_dir()):
            metadata = channel_dir / CHANNEL_METADATA
            if not metadata.is_file():
                continue
            try:
                channel = load_channel_record(metadata)
                amount = count_data_files(channel_dir)
            except (OSError, RecordDecodeError) as e:
                logger.warning(f"Invalid channel data for {channel_dir.name}, skipping: {e}")
                continue

            index.channels[channel_dir.name] = channel
            by_id[channel.id] = ChannelIndexEntry.for_channel(channel, amount)
            logger.debug(f"Channel {channel.id} ({channel.name}): {amount} data files")

        index.entries = [by_id[channel_id] for channel_id in sorted(by_id)]
        return index
