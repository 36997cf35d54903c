"""
Snowflake timestamp decoding and human-readable byte sizes.

Snowflake ids carry milliseconds since the platform epoch in their high
bits; everything below bit 22 is worker/sequence data and is discarded.
"""

from datetime import datetime, timezone, tzinfo
from email.utils import format_datetime
from typing import Optional

PLATFORM_EPOCH_MS = 1420070400000
TIMESTAMP_SHIFT = 22

SNOWFLAKE_LIMIT = 2 ** 64

GIB = 1073741824
MIB = 1000000
KIB = 1000


def parse_snowflake(text: str) -> int:
    """Parse a decimal snowflake id.

    Raises:
        ValueError: text is not ASCII digits or does not fit in 64 bits.
    """
    if not (text.isascii() and text.isdecimal()):
        raise ValueError(f"Not a snowflake id: {text!r}")
    value = int(text)
    if value >= SNOWFLAKE_LIMIT:
        raise ValueError(f"Snowflake id out of range: {text!r}")
    return value


def snowflake_to_datetime(snowflake: int, tz: Optional[tzinfo] = None) -> datetime:
    """Recover the creation time encoded in a snowflake id."""
    ms = (snowflake >> TIMESTAMP_SHIFT) + PLATFORM_EPOCH_MS
    moment = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    # astimezone(None) converts to the system's local zone
    return moment.astimezone(tz)


def decode_timestamp(snowflake: int, tz: Optional[tzinfo] = None) -> str:
    """Format the creation time of a snowflake id as an RFC 2822 string."""
    return format_datetime(snowflake_to_datetime(snowflake, tz))


def format_size(size: int) -> str:
    """Format a byte count.

    GiB divides by 1024**3 while MiB and KiB divide by powers of 1000;
    rendered archives already depend on this mix so it is kept as is.
    """
    if size >= GIB:
        return f"{size / GIB:.2f} GiB"
    if size >= MIB:
        return f"{size / MIB:.2f} MiB"
    if size >= KIB:
        return f"{size / KIB:.2f} KiB"
    return f"{size} B"
