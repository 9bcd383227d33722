"""Farm records adapters for JSON payloads (no I/O)."""

from .snapshot import farm_snapshot_from_payload

__all__ = [
    "farm_snapshot_from_payload",
]
