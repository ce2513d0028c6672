# File: parkalloc/domain/aggregates.py
"""
Aggregate Roots for the Parking Allocator
Following Domain-Driven Design (DDD) Aggregate Pattern

Aggregates:
1. ParkingLot - Root aggregate owning every floor and slot

Key Concepts:
- The root enforces the slot invariants (occupant set iff ticket set)
- Floors and slots are only mutated through root methods
- Domain events are recorded for every allocation and release
- Failures are returned as values and never leave partial mutation behind
"""

from typing import List, Optional, Tuple, Union, Sequence
import logging

from .models import (
    Entity, ParkingSlot, Vehicle, VehicleCategory, SlotLayout, TicketId,
    TicketFormatError, Receipt, NoCapacity, InvalidTicket, InvalidTicketReason,
    DomainEvent, VehicleParkedEvent, VehicleLeftEvent
)
from .strategies import AllocationStrategy, PricingStrategy, FirstFitStrategy, StandardPricingStrategy


# ============================================================================
# BASE AGGREGATE ROOT
# ============================================================================

class AggregateRoot(Entity):
    """
    Base class for all aggregate roots
    Provides domain event collection and versioning
    """

    def __init__(self, id: Optional[str] = None):
        super().__init__(id)
        self._version: int = 1
        self._changes: List[DomainEvent] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def version(self) -> int:
        """Get current aggregate version"""
        return self._version

    def _increment_version(self) -> None:
        self._version += 1

    def _add_domain_event(self, event: DomainEvent) -> None:
        self._changes.append(event)
        self._logger.debug(f"Added domain event: {event.__class__.__name__}")

    def clear_events(self) -> List[DomainEvent]:
        """Clear and return all domain events"""
        events = self._changes.copy()
        self._changes.clear()
        return events

    @property
    def has_changes(self) -> bool:
        return len(self._changes) > 0


# ============================================================================
# FLOOR
# ============================================================================

class Floor(Entity):
    """
    Entity: A fixed, ordered group of slots built from a layout table
    """

    def __init__(self, number: int, layout: SlotLayout, id: Optional[str] = None):
        super().__init__(id)
        if number < 1:
            raise ValueError("Floor number must be at least 1")
        self.number = number
        self.layout = layout
        self._slots: List[ParkingSlot] = [
            ParkingSlot(slot_number, category)
            for slot_number, category in enumerate(layout.categories, start=1)
        ]

    @property
    def slots(self) -> Tuple[ParkingSlot, ...]:
        return tuple(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def find_first_fit(self, category: VehicleCategory) -> Optional[ParkingSlot]:
        """Lowest-numbered free slot admitting ``category``, or None"""
        for slot in self._slots:
            if slot.fits(category):
                return slot
        return None

    def get_slot(self, number: int) -> Optional[ParkingSlot]:
        """Slot by 1-based number, None when out of range"""
        if 1 <= number <= len(self._slots):
            return self._slots[number - 1]
        return None

    def free_slot_count(self, category: Optional[VehicleCategory] = None) -> int:
        return sum(
            1 for slot in self._slots
            if slot.is_available and (category is None or slot.allowed_category == category)
        )

    def __str__(self) -> str:
        return f"Floor {self.number}: {self.free_slot_count()} available slots"


# ============================================================================
# PARKING LOT AGGREGATE
# ============================================================================

AllocationResult = Union[TicketId, NoCapacity]
ReleaseResult = Union[Receipt, InvalidTicket]


class ParkingLot(AggregateRoot):
    """
    Aggregate Root: Named lot with a fixed number of floors

    ``allocate`` and ``release`` are the only state-changing operations.
    Both return either a success value or a failure value; nothing is
    raised for business failures.
    """

    def __init__(
        self,
        name: str,
        floor_layouts: Sequence[SlotLayout],
        allocation_strategy: Optional[AllocationStrategy] = None,
        pricing_strategy: Optional[PricingStrategy] = None,
        id: Optional[str] = None
    ):
        super().__init__(id)
        if not name or name != name.strip():
            raise ValueError("Parking lot name must be non-empty without surrounding whitespace")
        if not floor_layouts:
            raise ValueError("A parking lot needs at least one floor")

        self.name = name
        self.allocation_strategy = allocation_strategy or FirstFitStrategy()
        self.pricing_strategy = pricing_strategy or StandardPricingStrategy()
        self._floors: List[Floor] = [
            Floor(floor_number, layout)
            for floor_number, layout in enumerate(floor_layouts, start=1)
        ]

        self._logger.info(
            f"Created ParkingLot: {self.name} with {len(self._floors)} floors "
            f"({self.total_slots} slots)"
        )

    @classmethod
    def uniform(
        cls,
        name: str,
        floors: int,
        layout: SlotLayout,
        **kwargs
    ) -> 'ParkingLot':
        """Build a lot whose floors all share one layout"""
        if floors < 1:
            raise ValueError("A parking lot needs at least one floor")
        return cls(name, [layout] * floors, **kwargs)

    @property
    def floors(self) -> Tuple[Floor, ...]:
        return tuple(self._floors)

    @property
    def total_slots(self) -> int:
        return sum(len(floor) for floor in self._floors)

    @property
    def occupied_slots(self) -> int:
        return self.total_slots - self.available_slots

    @property
    def available_slots(self) -> int:
        return sum(floor.free_slot_count() for floor in self._floors)

    # ========================================================================
    # PUBLIC BUSINESS METHODS
    # ========================================================================

    def allocate(self, vehicle: Vehicle) -> AllocationResult:
        """
        Park a vehicle in the first fitting free slot
        Returns: the issued TicketId, or NoCapacity when no slot fits
        """
        self._logger.info(f"Allocating slot for {vehicle}")

        found = self.allocation_strategy.allocate_slot(self._floors, vehicle)
        if found is None:
            self._logger.warning(f"No {vehicle.category} slot available in lot {self.name}")
            return NoCapacity(vehicle.category)

        floor, slot = found
        ticket = slot.assign(vehicle, TicketId(self.name, floor.number, slot.number))
        self._increment_version()

        self._add_domain_event(VehicleParkedEvent(
            lot_name=self.name,
            ticket_id=str(ticket),
            license_plate=str(vehicle.license_plate),
            category=vehicle.category,
            floor_number=floor.number,
            slot_number=slot.number
        ))

        self._logger.info(f"Vehicle {vehicle.license_plate} parked (Ticket: {ticket})")
        return ticket

    def release(self, ticket_id: str, hours: int) -> ReleaseResult:
        """
        Free the slot addressed by ``ticket_id`` and bill the stay
        Returns: a Receipt, or InvalidTicket naming why nothing was released
        Raises: ValueError for negative hours (checked before any mutation)
        """
        if hours < 0:
            raise ValueError(f"Hours parked cannot be negative: {hours}")

        self._logger.info(f"Releasing ticket {ticket_id!r} after {hours}h")

        located = self._locate(ticket_id)
        if isinstance(located, InvalidTicket):
            self._logger.warning(f"Refused ticket {ticket_id!r}: {located.reason.value}")
            return located

        slot = located
        vehicle = slot.occupant
        amount = self.pricing_strategy.calculate_fee(slot.allowed_category, hours)
        slot.release()
        self._increment_version()

        receipt = Receipt(
            ticket_id=ticket_id,
            category=slot.allowed_category,
            hours=hours,
            amount=amount,
            license_plate=str(vehicle.license_plate) if vehicle else None
        )
        self._add_domain_event(VehicleLeftEvent(lot_name=self.name, receipt=receipt))

        self._logger.info(f"Ticket {ticket_id} released. Fee: {amount.format()}")
        return receipt

    def availability(self) -> List[Tuple[int, int]]:
        """(floor_number, free_slot_count) for every floor, in floor order"""
        return [(floor.number, floor.free_slot_count()) for floor in self._floors]

    def find_slot(self, ticket_id: str) -> Optional[ParkingSlot]:
        """Occupied slot holding ``ticket_id``, or None; read-only"""
        located = self._locate(ticket_id)
        return None if isinstance(located, InvalidTicket) else located

    # ========================================================================
    # INTERNAL HELPER METHODS
    # ========================================================================

    def _locate(self, ticket_id: str) -> Union[ParkingSlot, InvalidTicket]:
        """Decode a ticket id into the slot it addresses, by direct indexing"""
        try:
            ticket = TicketId.parse(ticket_id, self.name)
        except TicketFormatError as e:
            self._logger.debug(str(e))
            return InvalidTicket(str(ticket_id), InvalidTicketReason.MALFORMED_ID)

        if not 1 <= ticket.floor_number <= len(self._floors):
            return InvalidTicket(ticket_id, InvalidTicketReason.FLOOR_OUT_OF_RANGE)

        floor = self._floors[ticket.floor_number - 1]
        slot = floor.get_slot(ticket.slot_number)
        if slot is None:
            return InvalidTicket(ticket_id, InvalidTicketReason.SLOT_OUT_OF_RANGE)

        if slot.ticket is None or str(slot.ticket) != ticket_id:
            return InvalidTicket(ticket_id, InvalidTicketReason.NO_ACTIVE_TICKET)

        return slot

    def __str__(self) -> str:
        return f"ParkingLot {self.name}: {self.available_slots}/{self.total_slots} available"
