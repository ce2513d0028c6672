# File: parkalloc/application/commands.py
"""
Command Pattern Implementation for the Parking Allocator

Each menu action of the session shell is a command object: it validates
its own parameters, runs against the ParkingService, and returns a result
dictionary. The CommandProcessor executes commands, logs them and keeps a
bounded history.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime
import logging
import uuid

from pydantic import ValidationError

from .dtos import ParkRequestDTO, ExitRequestDTO
from .parking_service import ParkingService, ParkingServiceError


# ============================================================================
# COMMAND INTERFACES AND BASE CLASSES
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    A command represents one user action. Commands are named in the
    imperative (e.g., ParkVehicleCommand).
    """

    def __init__(self, command_id: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.executed_at: Optional[datetime] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, service: ParkingService) -> Dict[str, Any]:
        """
        Execute the command using the provided service

        Returns: Execution result dictionary with at least ``success``
        """
        pass

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate command parameters before execution

        Returns: (is_valid, error_messages)
        """
        return True, []

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
        }


# ============================================================================
# PARKING COMMANDS
# ============================================================================

class ParkVehicleCommand(Command):
    """Command to park a vehicle"""

    def __init__(self, license_plate: str, vehicle_type: str, color: Optional[str] = None):
        super().__init__()
        self.raw = {"license_plate": license_plate, "vehicle_type": vehicle_type, "color": color}
        self.request: Optional[ParkRequestDTO] = None

    def validate(self) -> Tuple[bool, List[str]]:
        try:
            self.request = ParkRequestDTO(**self.raw)
        except ValidationError as e:
            return False, [error["msg"] for error in e.errors()]
        return True, []

    def execute(self, service: ParkingService) -> Dict[str, Any]:
        if self.request is None:
            raise ParkingServiceError("ParkVehicleCommand executed before validation")
        allocation = service.park_vehicle(self.request)
        return {
            "success": allocation.success,
            "command_id": self.command_id,
            "ticket_id": allocation.ticket_id,
            "message": allocation.message,
            "allocation": allocation,
        }


class ExitVehicleCommand(Command):
    """Command to remove a vehicle and bill it"""

    def __init__(self, ticket_id: str, hours: Any):
        super().__init__()
        self.raw = {"ticket_id": ticket_id, "hours": hours}
        self.request: Optional[ExitRequestDTO] = None

    def validate(self) -> Tuple[bool, List[str]]:
        try:
            self.request = ExitRequestDTO(**self.raw)
        except ValidationError as e:
            return False, [error["msg"] for error in e.errors()]
        return True, []

    def execute(self, service: ParkingService) -> Dict[str, Any]:
        if self.request is None:
            raise ParkingServiceError("ExitVehicleCommand executed before validation")
        exit_result = service.exit_vehicle(self.request)
        return {
            "success": exit_result.success,
            "command_id": self.command_id,
            "ticket_id": exit_result.ticket_id,
            "message": exit_result.message,
            "exit": exit_result,
        }


class ViewAvailabilityCommand(Command):
    """Command to report free slots per floor"""

    def execute(self, service: ParkingService) -> Dict[str, Any]:
        status = service.get_parking_lot_status()
        return {"success": True, "command_id": self.command_id, "status": status}


class ViewRevenueCommand(Command):
    """Command to report revenue collected in this session"""

    def execute(self, service: ParkingService) -> Dict[str, Any]:
        report = service.get_revenue_report()
        return {"success": True, "command_id": self.command_id, "report": report}


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Processes commands with:
    - Parameter validation
    - Command logging
    - Bounded execution history
    """

    def __init__(self, service: ParkingService, max_history_size: int = 1000):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)
        self.command_history: List[Command] = []
        self.max_history_size = max_history_size

    def process(self, command: Command) -> Dict[str, Any]:
        """
        Validate and execute a command

        Returns: Execution result; invalid parameters yield
        ``{"success": False, "errors": [...]}`` without touching the lot
        """
        self.logger.info(f"Processing command: {command.get_description()}")

        is_valid, errors = command.validate()
        if not is_valid:
            self.logger.warning(f"Rejected {command.get_description()}: {errors}")
            return {
                "success": False,
                "command_id": command.command_id,
                "errors": errors,
                "message": "; ".join(errors),
            }

        try:
            result = command.execute(self.service)
        except ParkingServiceError as e:
            self.logger.error(f"Error processing command: {e}", exc_info=True)
            return {"success": False, "command_id": command.command_id, "message": str(e)}

        command.executed_at = datetime.now()
        self._add_to_history(command)
        return result

    def get_history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        history = self.command_history if limit is None else self.command_history[-limit:]
        return [command.to_dict() for command in history]

    def clear_history(self):
        self.command_history.clear()

    def _add_to_history(self, command: Command):
        self.command_history.append(command)
        if len(self.command_history) > self.max_history_size:
            self.command_history.pop(0)
