"""Shared CLI/config option sets.

Keep these centralized so CLI choices, mapping validation, and workspace
config stay in sync.
"""

COLUMN_KINDS = ("text", "number", "currency", "url", "hidden")
NUMERIC_KINDS = ("number", "currency")

RECORD_TRANSPORTS = ("fs", "url")
OUTPUT_FORMATS = ("table", "json")

VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def is_numeric_kind(kind: str) -> bool:
    return (kind or "").lower() in NUMERIC_KINDS
