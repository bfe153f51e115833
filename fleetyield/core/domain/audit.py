from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class AuditEvent:
    """A change made by the engine, published for the audit trail."""

    action: str  # e.g. "forecast.upsert"
    entity_type: str
    entity_id: int | str | None = None
    new_values: dict[str, Any] = field(default_factory=dict)
    user_id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_message(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "new_values": self.new_values,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
        }
