from .hit import HitEvent, StoredHit

__all__ = ["HitEvent", "StoredHit"]
