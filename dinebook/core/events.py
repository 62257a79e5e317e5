"""
Domain events system

Reservation lifecycle events are published after a workflow commits so
that other parts of the system can react to them.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import uuid
import structlog

logger = structlog.get_logger(__name__)
audit_logger = structlog.get_logger("dinebook.audit")


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


class ReservationCreated(DomainEvent):
    """Event fired when a diner books a reservation"""

    def __init__(
        self,
        reservation_id: uuid.UUID,
        diner_id: uuid.UUID,
        guests_count: int,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.reservation_id = reservation_id
        self.diner_id = diner_id
        self.guests_count = guests_count

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "reservation_id": str(self.reservation_id),
            "diner_id": str(self.diner_id),
            "guests_count": self.guests_count
        })
        return data


class ReservationTablesAssigned(DomainEvent):
    """Event fired when tables are assigned and the reservation is pending"""

    def __init__(
        self,
        reservation_id: uuid.UUID,
        table_ids: List[uuid.UUID],
        table_count: int,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.reservation_id = reservation_id
        self.table_ids = table_ids
        self.table_count = table_count

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "reservation_id": str(self.reservation_id),
            "table_ids": [str(table_id) for table_id in self.table_ids],
            "table_count": self.table_count
        })
        return data


class ReservationConfirmed(DomainEvent):
    """Event fired when a payment is captured for a reservation"""

    def __init__(
        self,
        reservation_id: uuid.UUID,
        payment_id: uuid.UUID,
        total_amount: float,
        deposit_fee: float,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.reservation_id = reservation_id
        self.payment_id = payment_id
        self.total_amount = total_amount
        self.deposit_fee = deposit_fee

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "reservation_id": str(self.reservation_id),
            "payment_id": str(self.payment_id),
            "total_amount": self.total_amount,
            "deposit_fee": self.deposit_fee
        })
        return data


class ReservationRemoved(DomainEvent):
    """Event fired when a reservation is deleted"""

    def __init__(
        self,
        reservation_id: uuid.UUID,
        diner_id: Optional[uuid.UUID],
        released_table_ids: List[uuid.UUID],
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.reservation_id = reservation_id
        self.diner_id = diner_id
        self.released_table_ids = released_table_ids

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "reservation_id": str(self.reservation_id),
            "diner_id": str(self.diner_id) if self.diner_id else None,
            "released_table_ids": [str(table_id) for table_id in self.released_table_ids]
        })
        return data


# Subscribers registered under this name receive every event
ALL_EVENTS = "*"


class EventBus:
    """In-process publisher for reservation events"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, handler: Callable):
        """Register an async handler for an event class name or ALL_EVENTS"""
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Unsubscribed {getattr(handler, '__name__', handler)} from {event_type}")

    def handlers_for(self, event_type: str) -> List[Callable]:
        return self._subscribers.get(event_type, []) + self._subscribers.get(ALL_EVENTS, [])

    async def publish(self, event: DomainEvent):
        """Deliver an event to its subscribers in registration order"""
        event_type = event.__class__.__name__
        handlers = self.handlers_for(event_type)
        if not handlers:
            logger.debug(f"No subscribers for {event_type}")
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                # The workflow has already committed; report and keep delivering
                logger.error(
                    f"Subscriber failed for {event_type}: {e}",
                    event_id=str(event.event_id),
                    exc_info=True,
                )

    def clear_subscribers(self):
        self._subscribers.clear()


async def audit_log_handler(event: DomainEvent):
    """Write every reservation event to the structured audit log"""
    audit_logger.info("reservation_event", **event.to_dict())


def register_audit_subscriber(bus: EventBus):
    bus.subscribe(ALL_EVENTS, audit_log_handler)


event_bus = EventBus()
