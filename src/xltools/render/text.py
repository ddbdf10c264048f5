"""Plain-text helpers for tool content."""

from __future__ import annotations


def truncate_head(text: str, max_bytes: int) -> tuple[str, bool]:
    """Keep the head of ``text`` within ``max_bytes`` UTF-8 bytes.

    Cuts on the last line boundary that fits and appends a notice with the
    original size. Returns ``(text, truncated)``.
    """
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text, False

    head = encoded[:max_bytes].decode("utf-8", errors="ignore")
    newline = head.rfind("\n")
    if newline > 0:
        head = head[:newline]
    notice = f"\n[truncated: showing {len(head.encode('utf-8'))} of {len(encoded)} bytes]"
    return head + notice, True
