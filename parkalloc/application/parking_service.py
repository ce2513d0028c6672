# File: parkalloc/application/parking_service.py
"""
Parking Application Service

This module implements the application service layer for the parking
allocator. It turns validated request DTOs into domain calls, publishes
the domain events the lot records, and shapes results into output DTOs.

Responsibilities:
1. Execute the use cases (park, exit, availability, revenue)
2. Translate domain outcome values into DTOs for the shell
3. Drain and publish domain events after every state change
4. Wire the lot, ledger and event bus together (ParkingServiceFactory)
"""

from typing import List, Optional, Tuple
import logging

from ..config import LotSettings
from ..domain.models import (
    Vehicle, TicketId, Receipt, NoCapacity, InvalidTicket,
    VehicleParkedEvent, VehicleLeftEvent
)
from ..domain.aggregates import ParkingLot
from ..infrastructure.messaging import EventBus, ParkingEventHandler, BillingEventHandler
from ..infrastructure.repositories import (
    ReceiptLedger, InMemoryReceiptLedger, RepositoryFactory, LedgerError
)
from .dtos import (
    ParkRequestDTO, ExitRequestDTO, ParkingAllocationDTO, ParkingExitDTO,
    FloorAvailabilityDTO, ParkingLotStatusDTO, RevenueReportDTO
)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ParkingServiceError(Exception):
    """Base exception for parking service errors"""
    pass


class VehicleValidationError(ParkingServiceError):
    """Exception for vehicle validation errors"""
    pass


# ============================================================================
# MAIN PARKING SERVICE
# ============================================================================

class ParkingService:
    """
    Main application service for the parking allocator

    Use cases:
    1. Vehicle parking (first-fit allocation, ticket issue)
    2. Vehicle exit (ticket validation, billing, receipt)
    3. Availability and revenue reporting

    Requests are processed one at a time; the service holds no lock.
    """

    def __init__(
        self,
        parking_lot: ParkingLot,
        ledger: Optional[ReceiptLedger] = None,
        event_bus: Optional[EventBus] = None
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.parking_lot = parking_lot
        self.ledger = ledger if ledger is not None else InMemoryReceiptLedger()

        if event_bus is None:
            event_bus = EventBus()
            self._subscribe_default_handlers(event_bus, self.ledger)
        self.event_bus = event_bus

        self.logger.info(f"ParkingService initialized for lot {parking_lot.name}")

    @staticmethod
    def _subscribe_default_handlers(event_bus: EventBus, ledger: ReceiptLedger) -> None:
        audit = ParkingEventHandler()
        event_bus.subscribe(VehicleParkedEvent.event_type, audit)
        event_bus.subscribe(VehicleLeftEvent.event_type, audit)
        event_bus.subscribe(VehicleLeftEvent.event_type, BillingEventHandler(ledger))

    def _publish_events(self) -> None:
        self.event_bus.publish_all(self.parking_lot.clear_events())

    # ========================================================================
    # USE CASES
    # ========================================================================

    def park_vehicle(self, request: ParkRequestDTO) -> ParkingAllocationDTO:
        """
        Park a vehicle in the lot

        Use Case: Vehicle Entry
        1. Build the domain vehicle from the request
        2. Allocate the first fitting slot
        3. Publish the parked event
        """
        self.logger.info(f"Processing parking request for {request.license_plate}")

        try:
            vehicle = self._to_vehicle(request)
        except VehicleValidationError as e:
            return ParkingAllocationDTO(success=False, message=str(e))

        outcome = self.parking_lot.allocate(vehicle)
        if isinstance(outcome, NoCapacity):
            return ParkingAllocationDTO(
                success=False,
                vehicle_type=outcome.category.value,
                message=outcome.message
            )

        self._publish_events()
        return self._allocation_dto(outcome, vehicle)

    def exit_vehicle(self, request: ExitRequestDTO) -> ParkingExitDTO:
        """
        Release the slot addressed by a ticket and bill the stay

        Use Case: Vehicle Exit
        1. Validate the ticket against the addressed slot
        2. Compute the fee and free the slot
        3. Publish the left event (which records the receipt)
        """
        self.logger.info(f"Processing exit request for ticket {request.ticket_id}")

        outcome = self.parking_lot.release(request.ticket_id, request.hours)
        if isinstance(outcome, InvalidTicket):
            return ParkingExitDTO(
                success=False,
                ticket_id=outcome.ticket_id,
                reason=outcome.reason.value,
                message=outcome.message
            )

        result = self._exit_dto(outcome)
        try:
            self._publish_events()
        except LedgerError as e:
            # The slot is already free; the receipt still goes back to the operator
            self.logger.error(f"Ticket {outcome.ticket_id} released but not recorded: {e}", exc_info=True)
            result.warning = "Receipt could not be recorded; revenue report will not include it."
        return result

    def availability(self) -> List[Tuple[int, int]]:
        return self.parking_lot.availability()

    def get_parking_lot_status(self) -> ParkingLotStatusDTO:
        """Get current status of the parking lot"""
        lot = self.parking_lot
        total = lot.total_slots
        available = lot.available_slots
        floors = [
            FloorAvailabilityDTO(
                floor_number=floor.number,
                available_slots=floor.free_slot_count(),
                total_slots=len(floor)
            )
            for floor in lot.floors
        ]
        return ParkingLotStatusDTO(
            lot_name=lot.name,
            total_slots=total,
            occupied_slots=total - available,
            available_slots=available,
            occupancy_rate=(total - available) / total if total else 0.0,
            floors=floors
        )

    def get_revenue_report(self) -> RevenueReportDTO:
        """Revenue collected from the receipts issued so far"""
        by_category = self.ledger.revenue_by_category()
        return RevenueReportDTO(
            lot_name=self.parking_lot.name,
            completed_sessions=self.ledger.count(),
            total_revenue=self.ledger.total_revenue().amount,
            by_vehicle_type={category.value: money.amount for category, money in by_category.items()}
        )

    # ========================================================================
    # HELPERS
    # ========================================================================

    @staticmethod
    def _to_vehicle(request: ParkRequestDTO) -> Vehicle:
        try:
            return Vehicle.create(request.license_plate, request.category, request.color)
        except ValueError as e:
            raise VehicleValidationError(f"Invalid vehicle: {e}") from e

    @staticmethod
    def _allocation_dto(ticket: TicketId, vehicle: Vehicle) -> ParkingAllocationDTO:
        return ParkingAllocationDTO(
            success=True,
            ticket_id=str(ticket),
            floor_number=ticket.floor_number,
            slot_number=ticket.slot_number,
            vehicle_type=vehicle.category.value,
            message=f"Parked: {ticket}"
        )

    @staticmethod
    def _exit_dto(receipt: Receipt) -> ParkingExitDTO:
        return ParkingExitDTO(
            success=True,
            ticket_id=receipt.ticket_id,
            vehicle_type=receipt.category.value,
            license_plate=receipt.license_plate,
            hours=receipt.hours,
            amount=receipt.amount.amount,
            currency=receipt.amount.currency,
            message="Vehicle removed"
        )


# ============================================================================
# SERVICE FACTORY
# ============================================================================

class ParkingServiceFactory:
    """Builds a fully wired service from settings"""

    @staticmethod
    def create(settings: LotSettings) -> ParkingService:
        lot = ParkingLot.uniform(settings.lot_name, settings.floors, settings.slot_layout())
        ledger = RepositoryFactory.create_sqlalchemy_ledger(settings.database_url)
        return ParkingService(lot, ledger=ledger)

    @staticmethod
    def create_in_memory(settings: Optional[LotSettings] = None) -> ParkingService:
        settings = settings or LotSettings()
        lot = ParkingLot.uniform(settings.lot_name, settings.floors, settings.slot_layout())
        return ParkingService(lot, ledger=InMemoryReceiptLedger())
