"""Typed records decoded from the raw export schema."""

from .records import (
    Attachment,
    Author,
    ChannelRecord,
    Message,
    ReplyReference,
    ServerRecord,
    load_channel_record,
    load_server_record,
    parse_id,
    parse_messages,
)

__all__ = [
    "Attachment",
    "Author",
    "ChannelRecord",
    "Message",
    "ReplyReference",
    "ServerRecord",
    "load_channel_record",
    "load_server_record",
    "parse_id",
    "parse_messages",
]
