"""
Domain repositories for the Control module.
"""
from typing import List, Protocol
from .intersection import Intersection

class IntersectionRegistry(Protocol):
    """
    Store of intersections keyed by id.
    """
    def add(self, intersection: Intersection) -> Intersection:
        ...

    def get(self, intersection_id: str) -> Intersection:
        ...

    def remove(self, intersection_id: str) -> Intersection:
        ...

    def list(self) -> List[Intersection]:
        ...

    def __contains__(self, intersection_id: str) -> bool:
        ...
