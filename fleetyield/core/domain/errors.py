"""
Engine Errors - Exceptions surfaced to callers of the analytics engine.

Numeric edge cases never raise; only bad configuration and missing
upstream records do.
"""


class EngineError(Exception):
    """Base class for all engine errors."""


class InvalidSettings(EngineError):
    """Raised when system settings violate a validation rule."""

    def __init__(self, constraint: str):
        self.constraint = constraint
        super().__init__(constraint)


class MissingUpstreamData(EngineError):
    """Raised when a collaborator has no record for the requested id."""

    def __init__(self, entity: str, entity_id: int | str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
