"""
HTML fragments for messages, replies and attachments.

Fragments are built with ``Markup.format`` so every interpolated value
coming from the export (content, names, filenames, urls) is escaped.
"""

from datetime import tzinfo
from typing import Callable, List, Optional

from markupsafe import Markup

from ..codec import decode_timestamp, format_size, parse_snowflake
from ..errors import ChunkFormatError
from ..model import Attachment, Message, ReplyReference


REPLY_INDICATOR = "REPLY: "

ATTACHMENT_HTML = Markup(
    '\n<img src="{src}" alt="" />\n<br>\n'
    'Name: {filename} Size: {size} Id: {id} Ephemeral: {ephemeral}\n<br>\n'
)

REPLY_HTML = Markup(
    '\n<div class="message">\n'
    '    <div class="author">\n'
    '        <img src="{avatar}" alt="" />\n'
    '        ORIGINAL: {username}#{discriminator} ({author_id}) <br>\n'
    '        Bot: {bot} Mfa: {mfa} Pinned: {pinned} Timestamp: {timestamp}\n'
    '    </div>\n'
    '    <div class="content">\n'
    '        {content}\n'
    '    </div>\n'
    '    <div class="attachments">\n'
    '        {attachments}\n'
    '    </div>\n'
    '</div>\n'
)

MESSAGE_HTML = Markup(
    '\n<div class="message">\n'
    '    <div class="reply">\n'
    '        {reply}\n'
    '    </div>\n'
    '    <div class="author">\n'
    '        <img src="{avatar}" alt="" /> <br>\n'
    '        {indicator}{username}#{discriminator} ({author_id}) <br>\n'
    '        Bot: {bot} Mfa: {mfa} Pinned: {pinned} Timestamp: {timestamp}\n'
    '    </div>\n'
    '    <div class="content">\n'
    '        {indicator}{content}\n'
    '    </div>\n'
    '    <div class="attachments">\n'
    '        {attachments}\n'
    '    </div>\n'
    '</div>\n'
)

AttachmentHref = Callable[[Attachment], str]


def flag(value: bool) -> str:
    return "true" if value else "false"


def message_timestamp(message_id: str, tz: Optional[tzinfo] = None) -> str:
    """Render the creation time of a message id.

    Raises:
        ChunkFormatError: the id is not a 64-bit decimal integer or its
            time cannot be represented.
    """
    try:
        return decode_timestamp(parse_snowflake(message_id), tz)
    except (ValueError, OverflowError, OSError) as e:
        raise ChunkFormatError(f"Invalid message id {message_id!r}: {e}") from e


def render_attachments(attachments: List[Attachment], href: AttachmentHref) -> Markup:
    return Markup("").join(
        ATTACHMENT_HTML.format(
            src=href(attachment),
            filename=attachment.filename,
            size=format_size(attachment.size),
            id=attachment.id,
            ephemeral=flag(attachment.ephemeral),
        )
        for attachment in attachments
    )


def _original_url(attachment: Attachment) -> str:
    return attachment.url


def render_reply(reference: ReplyReference, tz: Optional[tzinfo] = None) -> Markup:
    """Render the message being replied to.

    Its attachments point at their original urls, since only the replying
    message's attachments are archived beside the channel.
    """
    author = reference.author
    return REPLY_HTML.format(
        avatar=author.avatar,
        username=author.username,
        discriminator=author.discriminator,
        author_id=author.id,
        bot=flag(author.bot),
        mfa=flag(author.mfa),
        pinned=flag(reference.pinned),
        timestamp=message_timestamp(reference.id, tz),
        content=reference.content,
        attachments=render_attachments(reference.attachments, _original_url),
    )


def render_message(message: Message, href: AttachmentHref,
                   tz: Optional[tzinfo] = None) -> Markup:
    """Render one message together with the message it replies to."""
    reply = Markup("").join(render_reply(ref, tz) for ref in message.replies)
    indicator = REPLY_INDICATOR if message.replies else ""
    author = message.author
    return MESSAGE_HTML.format(
        reply=reply,
        avatar=author.avatar,
        indicator=indicator,
        username=author.username,
        discriminator=author.discriminator,
        author_id=author.id,
        bot=flag(author.bot),
        mfa=flag(author.mfa),
        pinned=flag(message.pinned),
        timestamp=message_timestamp(message.id, tz),
        content=message.content,
        attachments=render_attachments(message.attachments, href),
    )


def render_messages(messages: List[Message], href: AttachmentHref,
                    tz: Optional[tzinfo] = None) -> Markup:
    return Markup("").join(render_message(m, href, tz) for m in messages)
