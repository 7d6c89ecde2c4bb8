"""
Domain events system

Domain events represent important business events that can be published
and subscribed to by multiple parts of the system. The scheduled jobs
publish here; notification channels (email, SMS, push) subscribe.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, List
import uuid
import structlog

logger = structlog.get_logger(__name__)


class DomainEvent:
    """Base class for domain events"""

    def __init__(self, event_id: uuid.UUID = None):
        self.event_id = event_id or uuid.uuid4()
        self.occurred_at = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "event_type": self.__class__.__name__
        }


class MembershipsExpiringSoon(DomainEvent):
    """Event fired for each tenant with memberships about to expire"""

    def __init__(
        self,
        tenant_id: uuid.UUID,
        window_start: date,
        window_end: date,
        members: List[Dict[str, Any]],
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.tenant_id = tenant_id
        self.window_start = window_start
        self.window_end = window_end
        self.members = members

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "tenant_id": str(self.tenant_id),
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "members": self.members
        })
        return data


class MemberStatusesReconciled(DomainEvent):
    """Event fired after a reconciliation sweep"""

    def __init__(
        self,
        run_date: date,
        activated: int,
        deactivated: int,
        failed: int,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.run_date = run_date
        self.activated = activated
        self.deactivated = deactivated
        self.failed = failed

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "run_date": self.run_date.isoformat(),
            "activated": self.activated,
            "deactivated": self.deactivated,
            "failed": self.failed
        })
        return data


class EventBus:
    """Simple in-memory event bus for publishing domain events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to a specific event type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to event type: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        """Unsubscribe from an event type"""
        if event_type in self._subscribers:
            self._subscribers[event_type].remove(handler)
            logger.debug(f"Unsubscribed handler from event type: {event_type}")

    async def publish(self, event: DomainEvent):
        """Publish an event to all subscribers"""
        event_type = event.__class__.__name__
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug(f"No subscribers for event type: {event_type}")
            return

        logger.info(f"Publishing event {event_type}: {event.event_id}")

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    def clear_subscribers(self):
        """Clear all subscribers (useful for testing)"""
        self._subscribers.clear()
        logger.debug("Cleared all event subscribers")


async def log_expiring_memberships(event: MembershipsExpiringSoon):
    """Default subscriber until a delivery channel is wired in"""
    logger.info(
        "memberships_expiring_soon",
        tenant_id=str(event.tenant_id),
        count=len(event.members),
        window_end=event.window_end.isoformat(),
    )


# Global event bus instance
event_bus = EventBus()
