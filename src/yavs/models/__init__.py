from __future__ import annotations

from yavs.models.vanity import VanityRecord

__all__ = [
    "VanityRecord",
]
