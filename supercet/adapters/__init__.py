"""Adapters package - Bridge between the session engine and its callers.

Contains the per-session event channel and the blocking / streaming
delivery adapters that consume it.
"""
from __future__ import annotations

__all__ = [
    "SessionChannel",
    "StreamForwarder",
    "collect",
    "event_payload",
]

from supercet.adapters.channel import SessionChannel
from supercet.adapters.delivery import StreamForwarder, collect, event_payload
