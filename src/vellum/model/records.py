"""
Record types for servers, channels and messages.

Field names in the raw export are PascalCase (``Id``, ``Author``,
``ReferencedMessage``); this module maps them onto snake_case dataclasses.
Numeric ids stored as strings decode leniently to 0 on the server and
channel records. Message ids stay as strings until a timestamp is needed.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from ..errors import RecordDecodeError

logger = logging.getLogger(__name__)


def parse_id(value: Any) -> int:
    """Parse a string-encoded numeric id, defaulting to 0."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        logger.debug(f"Unparseable id {value!r}, using 0")
        return 0
    return parsed if parsed >= 0 else 0


def _require(data: Any, key: str, kind: type) -> Any:
    if not isinstance(data, dict):
        raise RecordDecodeError(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        raise RecordDecodeError(f"Missing field: {key}")
    value = data[key]
    # bool is an int subclass; sizes must be real integers
    if kind is int and isinstance(value, bool):
        raise RecordDecodeError(f"Field {key} must be int")
    if not isinstance(value, kind):
        raise RecordDecodeError(f"Field {key} must be {kind.__name__}")
    return value


def _flag(data: Dict[str, Any], *keys: str) -> bool:
    for key in keys:
        if key in data:
            return bool(data[key])
    return False


@dataclass(frozen=True)
class ServerRecord:
    id: int
    name: str
    icon: str
    owner_id: int
    description: str

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "ServerRecord":
        return cls(
            id=parse_id(_require(data, "Id", str)),
            name=_require(data, "Name", str),
            icon=_require(data, "Icon", str),
            owner_id=parse_id(_require(data, "OwnerId", str)),
            description=_require(data, "Description", str),
        )

    def fields(self) -> Dict[str, str]:
        """Template fields describing this server."""
        return {
            "server_id": str(self.id),
            "server_name": self.name,
            "server_icon": self.icon,
            "server_owner": str(self.owner_id),
            "server_description": self.description,
        }


@dataclass(frozen=True)
class ChannelRecord:
    id: int
    name: str
    topic: str

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "ChannelRecord":
        return cls(
            id=parse_id(_require(data, "Id", str)),
            name=_require(data, "Name", str),
            topic=_require(data, "Topic", str),
        )

    def fields(self) -> Dict[str, str]:
        """Template fields describing this channel."""
        return {
            "channel_id": str(self.id),
            "channel_name": self.name,
            "channel_topic": self.topic,
        }


@dataclass(frozen=True)
class Attachment:
    id: str
    url: str
    filename: str
    size: int
    ephemeral: bool

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "Attachment":
        return cls(
            id=_require(data, "Id", str),
            url=_require(data, "Url", str),
            filename=_require(data, "Filename", str),
            size=_require(data, "Size", int),
            # the export spells it "Ephermeral"
            ephemeral=_flag(data, "Ephermeral", "Ephemeral"),
        )


@dataclass(frozen=True)
class Author:
    username: str
    discriminator: str
    id: str
    bot: bool
    mfa: bool
    avatar: str

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "Author":
        return cls(
            username=_require(data, "Username", str),
            discriminator=_require(data, "Discriminator", str),
            id=_require(data, "Id", str),
            bot=_flag(data, "Bot"),
            mfa=_flag(data, "Mfa"),
            avatar=_require(data, "Avatar", str),
        )


@dataclass(frozen=True)
class ReplyReference:
    id: str
    author: Author
    attachments: List[Attachment]
    content: str
    pinned: bool

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "ReplyReference":
        return cls(
            id=_require(data, "Id", str),
            author=Author.from_raw(_require(data, "Author", dict)),
            attachments=_attachments(data),
            content=_require(data, "Content", str),
            pinned=_flag(data, "Pinned"),
        )


@dataclass(frozen=True)
class Message:
    id: str
    author: Author
    attachments: List[Attachment]
    pinned: bool
    content: str
    replies: List[ReplyReference] = field(default_factory=list)

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "Message":
        references = data.get("ReferencedMessage") if isinstance(data, dict) else None
        if references is None:
            references = []
        if not isinstance(references, list):
            raise RecordDecodeError("Field ReferencedMessage must be list")
        return cls(
            id=_require(data, "Id", str),
            author=Author.from_raw(_require(data, "Author", dict)),
            attachments=_attachments(data),
            pinned=_flag(data, "Pinned"),
            content=_require(data, "Content", str),
            replies=[ReplyReference.from_raw(ref) for ref in references],
        )


def _attachments(data: Dict[str, Any]) -> List[Attachment]:
    raw = data.get("Attachments")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise RecordDecodeError("Field Attachments must be list")
    return [Attachment.from_raw(item) for item in raw]


def parse_messages(text: str) -> List[Message]:
    """Decode a chunk file body into messages, keeping on-disk order.

    Raises:
        RecordDecodeError: body is not valid JSON or not an array of messages.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecordDecodeError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise RecordDecodeError("Chunk body must be an array")
    return [Message.from_raw(item) for item in data]


def _load_json_object(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RecordDecodeError(f"Invalid JSON in {path}: {e}") from e


def load_server_record(path: Path) -> ServerRecord:
    """Read a ``server.json`` file.

    Raises:
        OSError: file is missing or unreadable.
        RecordDecodeError: file content is malformed.
    """
    return ServerRecord.from_raw(_load_json_object(path))


def load_channel_record(path: Path) -> ChannelRecord:
    """Read a ``channel.json`` file."""
    return ChannelRecord.from_raw(_load_json_object(path))
