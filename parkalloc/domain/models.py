# File: parkalloc/domain/models.py
"""
Domain Models for the Parking Allocator
Following Domain-Driven Design (DDD) principles with rich domain models

This module contains:
1. Value Objects: Immutable objects with no identity (plates, money, tickets, layouts)
2. Entities: Objects with identity and lifecycle (slots)
3. Enums: Vehicle categories and failure reasons
4. Outcome values: Receipts and the failures returned by the parking lot
5. Domain Events: Events representing business occurrences

All value objects validate themselves on construction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple, Iterable
from datetime import datetime
from decimal import Decimal
import uuid
from enum import Enum


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class VehicleCategory(Enum):
    """
    Enumeration of vehicle categories
    Each slot admits exactly one category and each category has its own base rate
    """
    CAR = "CAR"
    BIKE = "BIKE"
    TRUCK = "TRUCK"

    @property
    def base_rate(self) -> Decimal:
        """Charge for the first hour"""
        rates = {
            VehicleCategory.CAR: Decimal('40'),
            VehicleCategory.BIKE: Decimal('20'),
            VehicleCategory.TRUCK: Decimal('60'),
        }
        return rates[self]

    @classmethod
    def parse(cls, text: str) -> 'VehicleCategory':
        """
        Parse a category name typed by a user (case insensitive)
        Raises: ValueError for unknown categories
        """
        if text is None:
            raise ValueError("Vehicle type is required")
        normalized = text.strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            allowed = "/".join(c.value for c in cls)
            raise ValueError(f"Unknown vehicle type '{text}', expected one of {allowed}") from None

    def __str__(self) -> str:
        return self.value


class InvalidTicketReason(Enum):
    """Why a ticket id was refused at release time"""
    MALFORMED_ID = "malformed_id"
    FLOOR_OUT_OF_RANGE = "floor_out_of_range"
    SLOT_OUT_OF_RANGE = "slot_out_of_range"
    NO_ACTIVE_TICKET = "no_active_ticket"

    @property
    def message(self) -> str:
        messages = {
            InvalidTicketReason.MALFORMED_ID: "Invalid Ticket ID.",
            InvalidTicketReason.FLOOR_OUT_OF_RANGE: "Invalid floor.",
            InvalidTicketReason.SLOT_OUT_OF_RANGE: "Invalid slot.",
            InvalidTicketReason.NO_ACTIVE_TICKET: "Ticket not found.",
        }
        return messages[self]


# ============================================================================
# DOMAIN PRIMITIVES / VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)  # Value objects are immutable
class LicensePlate:
    """
    Value Object: License plate number with validation
    Represents the identifier printed on a vehicle
    """
    value: str

    def __post_init__(self):
        """Validate license plate after initialization"""
        if self.value is None or not self.value.strip():
            raise ValueError("License plate cannot be empty")

        # Plates are free text; only surrounding whitespace and case are normalized
        object.__setattr__(self, 'value', self.value.strip().upper())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """
    Value Object: Monetary amount with currency
    Provides arithmetic operations with validation
    """
    amount: Decimal
    currency: str = "INR"

    def __post_init__(self):
        """Validate money amount"""
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        if self.amount < Decimal('0'):
            raise ValueError("Money amount cannot be negative")

        if len(self.currency) != 3:
            raise ValueError(f"Currency must be 3-letter code: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money amounts (same currency only)"""
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} to {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    @classmethod
    def zero(cls, currency: str = "INR") -> 'Money':
        return cls(Decimal('0'), currency)

    def format(self) -> str:
        """Format money the way receipts print it"""
        return f"Rs. {self.amount:.1f}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "amount": float(self.amount),
            "currency": self.currency
        }


@dataclass(frozen=True)
class TicketId:
    """
    Value Object: Ticket identifier that doubles as a slot address

    Encoded as ``{lot_name}_{floor_number}_{slot_number}`` with 1-based
    numbers. There is no ticket registry; the id is decoded back into its
    floor and slot at release time.
    """
    lot_name: str
    floor_number: int
    slot_number: int

    SEPARATOR = "_"

    def __str__(self) -> str:
        return f"{self.lot_name}{self.SEPARATOR}{self.floor_number}{self.SEPARATOR}{self.slot_number}"

    @classmethod
    def parse(cls, text: str, lot_name: str) -> 'TicketId':
        """
        Decode a ticket id issued by the lot called ``lot_name``
        Raises: TicketFormatError if the text is not ``lot_name_<int>_<int>``
        """
        prefix = f"{lot_name}{cls.SEPARATOR}"
        if not isinstance(text, str) or not text.startswith(prefix):
            raise TicketFormatError(f"Ticket id {text!r} does not belong to lot {lot_name!r}")

        parts = text[len(prefix):].split(cls.SEPARATOR)
        if len(parts) != 2:
            raise TicketFormatError(f"Ticket id {text!r} must end with <floor>_<slot>")

        for part in parts:
            # ASCII digits only: int() would also accept signs, spaces and other scripts
            if not (part.isascii() and part.isdigit()):
                raise TicketFormatError(f"Ticket id {text!r} has a non-numeric part {part!r}")

        return cls(lot_name, int(parts[0]), int(parts[1]))


class TicketFormatError(ValueError):
    """Raised when a ticket id cannot be decoded"""
    pass


@dataclass(frozen=True)
class SlotLayout:
    """
    Value Object: Category of every slot on a floor, in slot order

    Layouts are configuration tables handed to each Floor, so the
    arrangement of slots is data rather than control flow.
    """
    categories: Tuple[VehicleCategory, ...]

    def __post_init__(self):
        object.__setattr__(self, 'categories', tuple(self.categories))
        if not self.categories:
            raise ValueError("A slot layout needs at least one slot")
        for category in self.categories:
            if not isinstance(category, VehicleCategory):
                raise ValueError(f"Layout entries must be VehicleCategory values, got {category!r}")

    @classmethod
    def standard(cls, total_slots: int) -> 'SlotLayout':
        """One truck slot, two bike slots, cars for the remainder"""
        if total_slots < 1:
            raise ValueError("Total slots must be at least 1")
        categories = []
        for number in range(1, total_slots + 1):
            if number == 1:
                categories.append(VehicleCategory.TRUCK)
            elif number <= 3:
                categories.append(VehicleCategory.BIKE)
            else:
                categories.append(VehicleCategory.CAR)
        return cls(tuple(categories))

    @classmethod
    def from_names(cls, names: Iterable[str]) -> 'SlotLayout':
        return cls(tuple(VehicleCategory.parse(name) for name in names))

    def __len__(self) -> int:
        return len(self.categories)

    def count(self, category: VehicleCategory) -> int:
        return sum(1 for c in self.categories if c == category)


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class Entity:
    """
    Base class for all domain entities
    Provides common functionality for entities with identity
    """

    def __init__(self, id: Optional[str] = None):
        self._id = id or str(uuid.uuid4())

    @property
    def id(self) -> str:
        """Get entity ID"""
        return self._id

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same ID and type"""
        if not isinstance(other, Entity):
            return False
        return self.id == other.id and type(self) == type(other)

    def __hash__(self) -> int:
        return hash((self.id, type(self).__name__))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


@dataclass(frozen=True)
class Vehicle:
    """
    Value Object: A vehicle as presented at the gate

    Color is recorded because the gate asks for it, but allocation and
    billing only look at the category.
    """
    license_plate: LicensePlate
    category: VehicleCategory
    color: Optional[str] = None

    @classmethod
    def create(cls, plate: str, category: VehicleCategory, color: Optional[str] = None) -> 'Vehicle':
        if not isinstance(category, VehicleCategory):
            category = VehicleCategory.parse(category)
        return cls(LicensePlate(plate), category, color.strip() if color else None)

    def __str__(self) -> str:
        return f"{self.category}({self.license_plate})"


class ParkingSlot(Entity):
    """
    Entity: Individual parking cell restricted to one vehicle category
    Lifecycle is Free -> Occupied -> Free; occupant and ticket are set together
    """

    def __init__(self, number: int, allowed_category: VehicleCategory, id: Optional[str] = None):
        super().__init__(id)
        if number <= 0:
            raise ValueError("Slot number must be positive")
        self.number = number
        self.allowed_category = allowed_category
        self.occupant: Optional[Vehicle] = None
        self.ticket: Optional[TicketId] = None

    @property
    def is_occupied(self) -> bool:
        return self.ticket is not None

    @property
    def is_available(self) -> bool:
        return not self.is_occupied

    def fits(self, category: VehicleCategory) -> bool:
        """True iff the category matches and the slot is free"""
        return self.allowed_category == category and self.is_available

    def assign(self, vehicle: Vehicle, ticket: TicketId) -> TicketId:
        """
        Occupy the slot. The caller has already checked ``fits``;
        nothing is re-validated here.
        """
        self.occupant = vehicle
        self.ticket = ticket
        return ticket

    def release(self) -> None:
        """Clear occupant and ticket unconditionally"""
        self.occupant = None
        self.ticket = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "allowed_category": self.allowed_category.value,
            "is_occupied": self.is_occupied,
            "license_plate": str(self.occupant.license_plate) if self.occupant else None,
            "ticket_id": str(self.ticket) if self.ticket else None,
        }

    def __str__(self) -> str:
        status = "Occupied" if self.is_occupied else "Available"
        return f"Slot {self.number} ({self.allowed_category}) - {status}"


# ============================================================================
# OUTCOME VALUES (returned by the parking lot instead of raised)
# ============================================================================

@dataclass(frozen=True)
class Receipt:
    """Derived, non-persisted summary of a completed parking session"""
    ticket_id: str
    category: VehicleCategory
    hours: int
    amount: Money
    license_plate: Optional[str] = None

    def lines(self) -> Tuple[str, ...]:
        return (
            f"Ticket ID: {self.ticket_id}",
            f"Vehicle Type: {self.category}",
            f"Hours Parked: {self.hours}",
            f"Amount: {self.amount.format()}",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "category": self.category.value,
            "hours": self.hours,
            "amount": self.amount.to_dict(),
            "license_plate": self.license_plate,
        }


@dataclass(frozen=True)
class NoCapacity:
    """No free slot of the requested category exists anywhere in the lot"""
    category: VehicleCategory

    @property
    def message(self) -> str:
        return "No slot available."


@dataclass(frozen=True)
class InvalidTicket:
    """A release request that was refused; the lot was left untouched"""
    ticket_id: str
    reason: InvalidTicketReason

    @property
    def message(self) -> str:
        return self.reason.message


# ============================================================================
# DOMAIN EVENTS (for event-driven architecture)
# ============================================================================

class DomainEvent(ABC):
    """
    Base class for all domain events
    Events represent something that happened in the domain
    """

    def __init__(self):
        self.event_id = str(uuid.uuid4())
        self.timestamp = datetime.now()
        self.version = "1.0"

    @property
    @abstractmethod
    def event_type(self) -> str:
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__} at {self.timestamp}"


class VehicleParkedEvent(DomainEvent):
    """Event raised when a vehicle is parked"""

    event_type = "vehicle.parked"

    def __init__(self, lot_name: str, ticket_id: str, license_plate: str, category: VehicleCategory,
                 floor_number: int, slot_number: int):
        super().__init__()
        self.lot_name = lot_name
        self.ticket_id = ticket_id
        self.license_plate = license_plate
        self.category = category
        self.floor_number = floor_number
        self.slot_number = slot_number

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "data": {
                "lot_name": self.lot_name,
                "ticket_id": self.ticket_id,
                "license_plate": self.license_plate,
                "category": self.category.value,
                "floor_number": self.floor_number,
                "slot_number": self.slot_number,
            }
        }


class VehicleLeftEvent(DomainEvent):
    """Event raised when a vehicle leaves and its receipt is issued"""

    event_type = "vehicle.left"

    def __init__(self, lot_name: str, receipt: Receipt):
        super().__init__()
        self.lot_name = lot_name
        self.receipt = receipt

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "data": {
                "lot_name": self.lot_name,
                **self.receipt.to_dict(),
            }
        }
