import threading
from typing import Dict, List

from ...common.exceptions import DuplicateIntersectionError, IntersectionNotFoundError
from ...common.logging import setup_logger
from ..domain import Intersection, IntersectionRegistry

logger = setup_logger(__name__)


class InMemoryIntersectionRegistry(IntersectionRegistry):
    """
    Keeps intersections in a dict.
    Inserts and removals are exclusive; lookups read the dict directly and
    iteration works on a copy, so neither blocks on writers.
    """
    def __init__(self):
        self._intersections: Dict[str, Intersection] = {}
        self._write_lock = threading.Lock()

    def add(self, intersection: Intersection) -> Intersection:
        with self._write_lock:
            if intersection.id in self._intersections:
                raise DuplicateIntersectionError(intersection.id)
            self._intersections[intersection.id] = intersection
        logger.debug(f"Registered intersection {intersection.id}")
        return intersection

    def get(self, intersection_id: str) -> Intersection:
        intersection = self._intersections.get(intersection_id)
        if intersection is None:
            raise IntersectionNotFoundError(intersection_id)
        return intersection

    def remove(self, intersection_id: str) -> Intersection:
        with self._write_lock:
            intersection = self._intersections.pop(intersection_id, None)
        if intersection is None:
            raise IntersectionNotFoundError(intersection_id)
        logger.debug(f"Removed intersection {intersection_id}")
        return intersection

    def list(self) -> List[Intersection]:
        return list(self._intersections.copy().values())

    def __contains__(self, intersection_id: str) -> bool:
        return intersection_id in self._intersections

    def __len__(self) -> int:
        return len(self._intersections)
