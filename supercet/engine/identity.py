"""Session identity extraction from CLI output lines.

Both CLIs print their session identity as a UUID somewhere in their
output. claude's stream is scanned as plain text; codex emits JSON
lines, which are parsed and walked before falling back to a plain scan.
"""
from __future__ import annotations

import json
import re
from collections import deque
from typing import Any

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

# Checked before the generic walk so an unrelated UUID elsewhere in the
# event (tool call ids, file ids) does not win.
PREFERRED_ID_KEYS = ("session_id", "sessionId", "thread_id", "threadId")


def is_valid_uuid(value: object) -> bool:
    """True only when the whole value is a canonical 8-4-4-4-12 UUID."""
    return isinstance(value, str) and UUID_PATTERN.fullmatch(value) is not None


def scan_text(line: str) -> str | None:
    """Return the first UUID-shaped substring of line, if any."""
    match = UUID_PATTERN.search(line)
    return match.group(0) if match else None


def _walk(root: Any):
    """Breadth-first iteration over every node of a decoded JSON value."""
    queue: deque[Any] = deque([root])
    while queue:
        item = queue.popleft()
        yield item
        if isinstance(item, dict):
            queue.extend(item.values())
        elif isinstance(item, list):
            queue.extend(item)


def scan_json(data: Any) -> str | None:
    """Find a session UUID in decoded JSON.

    Well-known id fields are preferred at any depth; otherwise the
    first string leaf (breadth-first) containing a UUID wins.
    """
    for node in _walk(data):
        if isinstance(node, dict):
            for key in PREFERRED_ID_KEYS:
                value = node.get(key)
                if isinstance(value, str) and is_valid_uuid(value):
                    return value

    for node in _walk(data):
        if isinstance(node, str):
            found = scan_text(node)
            if found:
                return found
    return None


def extract_from_json_line(line: str) -> str | None:
    """Parse line as JSON and scan it; fall back to a plain scan."""
    try:
        data = json.loads(line)
    except (ValueError, RecursionError):
        # Not JSON, or nested too deeply to decode
        return scan_text(line)
    return scan_json(data) or scan_text(line)
