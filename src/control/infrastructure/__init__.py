from .registry import InMemoryIntersectionRegistry

__all__ = ["InMemoryIntersectionRegistry"]
