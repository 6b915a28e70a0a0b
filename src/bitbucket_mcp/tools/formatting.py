"""Text helpers shared by the tool handlers."""

from datetime import datetime, timezone
from typing import Iterable, Optional


def format_date(value: Optional[datetime], missing: str = "Unknown") -> str:
    if value is None:
        return missing
    return _as_utc(value).strftime("%Y-%m-%d")


def format_datetime(value: Optional[datetime], missing: str = "Unknown") -> str:
    if value is None:
        return missing
    return _as_utc(value).strftime("%Y-%m-%d %H:%M:%S UTC")


def _as_utc(value: datetime) -> datetime:
    # Bitbucket timestamps carry an offset; treat naive ones as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.2f} KB"


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def or_default(value: Optional[str], default: str) -> str:
    return value if value else default


def join_names(names: Optional[Iterable[str]]) -> str:
    """Comma-join non-empty names; "None" when there are none."""
    joined = ", ".join(name for name in (names or []) if name)
    return joined or "None"


def list_response(summary: str, blocks: Iterable[str], separator: str = "\n\n") -> str:
    """Summary line, a blank line, then the item blocks."""
    return f"{summary}\n\n{separator.join(blocks)}"
