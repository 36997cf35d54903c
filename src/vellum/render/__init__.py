"""
Page reconstruction for archived servers.

Builds the channel index, renders chunk files into channel pages and
writes them through the templating and minifying collaborators.
"""

from .channel_index import ChannelIndex, ChannelIndexBuilder, ChannelIndexEntry, page_name
from .page_writer import PageWriter, TemplateSet
from .reconstructor import ReconstructionResult, Reconstructor, ServerContext

__all__ = [
    "ChannelIndex",
    "ChannelIndexBuilder",
    "ChannelIndexEntry",
    "PageWriter",
    "ReconstructionResult",
    "Reconstructor",
    "ServerContext",
    "TemplateSet",
    "page_name",
]
