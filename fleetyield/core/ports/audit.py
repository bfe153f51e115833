"""
AuditPublisher Port - Fire-and-forget sink for audit events.
"""

from abc import ABC, abstractmethod

from fleetyield.core.domain.audit import AuditEvent


class AuditPublisher(ABC):

    @abstractmethod
    def publish(self, event: AuditEvent) -> None:
        """
        Publish an audit event.

        Implementations must not raise on delivery failures.
        """
        ...

    def close(self) -> None:
        """Flush pending events and release broker resources."""
