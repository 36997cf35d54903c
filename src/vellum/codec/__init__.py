"""Snowflake id and byte-size formatting helpers."""

from .snowflake import decode_timestamp, format_size, parse_snowflake, snowflake_to_datetime

__all__ = ["decode_timestamp", "format_size", "parse_snowflake", "snowflake_to_datetime"]
