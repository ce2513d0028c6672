# File: parkalloc/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Allocator

DTOs carry data between the session shell and the application service:
1. Input DTOs - Raw user input, validated and normalized on creation
2. Output DTOs - Results handed back to the shell for printing

DTO Principles:
- Validation at creation
- No business logic, only data
- Serialization support
"""

from typing import Dict, List, Optional, Any
from datetime import datetime
from decimal import Decimal
import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import VehicleCategory, LicensePlate


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseDTO':
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        return cls(**json.loads(json_str))


# ============================================================================
# INPUT DTOs
# ============================================================================

class ParkRequestDTO(BaseDTO):
    """Vehicle presented at the gate"""
    license_plate: str
    vehicle_type: str
    color: Optional[str] = None

    @field_validator("license_plate")
    @classmethod
    def _valid_plate(cls, value: str) -> str:
        return LicensePlate(value).value

    @field_validator("vehicle_type")
    @classmethod
    def _known_vehicle_type(cls, value: str) -> str:
        return VehicleCategory.parse(value).value

    @property
    def category(self) -> VehicleCategory:
        return VehicleCategory(self.vehicle_type)


class ExitRequestDTO(BaseDTO):
    """Ticket handed back at the exit"""
    ticket_id: str = Field(min_length=1)
    hours: int = Field(ge=0)

    @field_validator("ticket_id")
    @classmethod
    def _strip_ticket(cls, value: str) -> str:
        return value.strip()


# ============================================================================
# OUTPUT DTOs
# ============================================================================

class ParkingAllocationDTO(BaseDTO):
    """Result of a park request"""
    success: bool
    ticket_id: Optional[str] = None
    floor_number: Optional[int] = None
    slot_number: Optional[int] = None
    vehicle_type: Optional[str] = None
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class ParkingExitDTO(BaseDTO):
    """Result of an exit request, carrying the receipt on success"""
    success: bool
    ticket_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    license_plate: Optional[str] = None
    hours: Optional[int] = None
    amount: Optional[Decimal] = None
    currency: str = "INR"
    reason: Optional[str] = None
    message: Optional[str] = None
    warning: Optional[str] = None

    def receipt_lines(self) -> List[str]:
        if not self.success:
            return []
        return [
            f"Ticket ID: {self.ticket_id}",
            f"Vehicle Type: {self.vehicle_type}",
            f"Hours Parked: {self.hours}",
            f"Amount: Rs. {self.amount:.1f}",
        ]


class FloorAvailabilityDTO(BaseDTO):
    """Free slot count for one floor"""
    floor_number: int
    available_slots: int
    total_slots: int


class ParkingLotStatusDTO(BaseDTO):
    """Snapshot of the whole lot"""
    lot_name: str
    total_slots: int
    occupied_slots: int
    available_slots: int
    occupancy_rate: float
    floors: List[FloorAvailabilityDTO]
    timestamp: datetime = Field(default_factory=datetime.now)


class RevenueReportDTO(BaseDTO):
    """Revenue collected so far in this session"""
    lot_name: str
    completed_sessions: int
    total_revenue: Decimal
    by_vehicle_type: Dict[str, Decimal]
    currency: str = "INR"
