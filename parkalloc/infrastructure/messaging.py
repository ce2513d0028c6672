# File: parkalloc/infrastructure/messaging.py
"""
Messaging Infrastructure for the Parking Allocator

Implements in-process publish/subscribe for the domain events raised by
the parking lot aggregate:
1. Event Bus - Routes events to the handlers subscribed to their type
2. Event Handlers - Side effects of parking and leaving (logging, billing)
"""

from abc import ABC, abstractmethod
from typing import Dict, List
import logging

from sqlalchemy.exc import SQLAlchemyError

from ..domain.models import DomainEvent, VehicleParkedEvent, VehicleLeftEvent
from .repositories import ReceiptLedger, LedgerError


# ============================================================================
# EVENT HANDLERS
# ============================================================================

class EventHandler(ABC):
    """Abstract base class for event handlers"""

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        """Handle a domain event"""
        pass

    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can handle the event"""
        return True


class ParkingEventHandler(EventHandler):
    """Writes an audit line for every arrival and departure"""

    def __init__(self):
        self._logger = logging.getLogger(self.__class__.__name__)

    def handle(self, event: DomainEvent) -> None:
        if isinstance(event, VehicleParkedEvent):
            self._logger.info(
                f"[{event.lot_name}] {event.category} {event.license_plate} parked at "
                f"floor {event.floor_number} slot {event.slot_number} ({event.ticket_id})"
            )
        elif isinstance(event, VehicleLeftEvent):
            receipt = event.receipt
            self._logger.info(
                f"[{event.lot_name}] {receipt.ticket_id} left after {receipt.hours}h, "
                f"charged {receipt.amount.format()}"
            )


class BillingEventHandler(EventHandler):
    """Records the receipt of every departure in the ledger"""

    def __init__(self, ledger: ReceiptLedger):
        self.ledger = ledger
        self._logger = logging.getLogger(self.__class__.__name__)

    def can_handle(self, event: DomainEvent) -> bool:
        return isinstance(event, VehicleLeftEvent)

    def handle(self, event: DomainEvent) -> None:
        try:
            self.ledger.add(event.receipt)
        except SQLAlchemyError as e:
            raise LedgerError(f"Receipt {event.receipt.ticket_id} was not recorded: {e}") from e
        self._logger.debug(f"Recorded receipt {event.receipt.ticket_id}")


# ============================================================================
# EVENT BUS (In-memory)
# ============================================================================

class EventBus:
    """
    In-memory event bus for intra-process event publishing

    Handlers are keyed by ``DomainEvent.event_type``. A failing handler is
    logged and re-raised so that billing errors are never silently lost.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe to events of a specific type"""
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            self._logger.debug(f"Subscribed {handler.__class__.__name__} to {event_type}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """Unsubscribe handler from events"""
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            self._logger.debug(f"Unsubscribed {handler.__class__.__name__} from {event_type}")

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers"""
        self._logger.debug(f"Publishing event: {event.event_type} (ID: {event.event_id})")

        for handler in self._subscribers.get(event.event_type, []):
            if not handler.can_handle(event):
                continue
            try:
                handler.handle(event)
            except Exception as e:
                self._logger.error(
                    f"Error handling event {event.event_type} with {handler.__class__.__name__}: {e}"
                )
                raise

    def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    def clear_subscribers(self) -> None:
        """Clear all subscribers (for testing)"""
        self._subscribers.clear()
