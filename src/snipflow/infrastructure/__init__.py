"""Infrastructure implementations (persistence)."""

from .mru import MruList

__all__ = ["MruList"]
