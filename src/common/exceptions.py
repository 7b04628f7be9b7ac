class ControlError(Exception):
    """Base exception for all control module errors."""
    pass

class DuplicateIntersectionError(ControlError):
    """Raised when an intersection id is already registered."""

    def __init__(self, intersection_id: str):
        self.intersection_id = intersection_id
        super().__init__(f"Intersection already exists with ID: {intersection_id}")

class IntersectionNotFoundError(ControlError):
    """Raised when operating on an unknown intersection id."""

    def __init__(self, intersection_id: str):
        self.intersection_id = intersection_id
        super().__init__(f"Intersection not found with ID: {intersection_id}")

class SignalConflictError(ControlError):
    """Raised when a GREEN transition would violate mutual exclusion."""

    def __init__(self, direction, conflicting_direction):
        self.direction = direction
        self.conflicting_direction = conflicting_direction
        super().__init__(
            f"Cannot set {direction.name} to GREEN: "
            f"conflicting direction {conflicting_direction.name} is already GREEN"
        )

class InvalidConfigurationError(ControlError):
    """Raised when configuration is invalid."""
    pass

class InvalidOperationError(ControlError):
    """Raised when a mode transition is not allowed in the current mode."""
    pass
