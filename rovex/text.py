"""Formatting of review text for display."""

DEFAULT_REVIEW_MESSAGE_MAX_CHARS = 4_000


def _decode_escaped_whitespace(message: str) -> str:
    # Some providers return JSON-escaped text inside the review body
    return (
        message.replace("\\r\\n", "\n")
        .replace("\\n", "\n")
        .replace("\\t", "  ")
    )


def format_review_message(
    message: str | None,
    max_chars: int = DEFAULT_REVIEW_MESSAGE_MAX_CHARS,
) -> str:
    """
    Normalize and clip a review message.

    Args:
        message: Raw review or chat text, may be None
        max_chars: Maximum characters kept; ``<= 0`` disables clipping

    Returns:
        Trimmed text with escaped whitespace decoded, clipped with a
        ``...(N more characters)`` trailer when longer than ``max_chars``
    """
    raw = (message or "").strip()
    if not raw:
        return ""

    normalized = _decode_escaped_whitespace(raw).replace("\r\n", "\n")
    if max_chars <= 0 or len(normalized) <= max_chars:
        return normalized

    remaining = len(normalized) - max_chars
    clipped = normalized[:max_chars].rstrip()
    return f"{clipped}\n\n...({remaining:,} more characters)"


__all__ = ["DEFAULT_REVIEW_MESSAGE_MAX_CHARS", "format_review_message"]
