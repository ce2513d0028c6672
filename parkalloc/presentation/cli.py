# File: parkalloc/presentation/cli.py
"""
Interactive session shell for the Parking Allocator

A line-oriented console session: the operator picks a role, then works
through a numbered menu until they choose Exit or input ends. The shell
only prompts, parses and prints; every action is a command handed to the
CommandProcessor.
"""

import logging
import sys
from enum import Enum
from typing import Optional, TextIO, Dict, Any, List

from ..application.commands import (
    CommandProcessor, ParkVehicleCommand, ExitVehicleCommand,
    ViewAvailabilityCommand, ViewRevenueCommand
)
from ..application.parking_service import ParkingService


class Role(Enum):
    """Who is at the console"""
    ADMIN = "ADMIN"
    USER = "USER"


class SessionShell:
    """Reads commands from ``stdin`` and prints results to ``stdout``"""

    USER_MENU = ("1. Park Vehicle", "2. Remove Vehicle", "3. Exit")
    ADMIN_MENU = ("1. View Parking Status", "2. View Revenue", "3. Exit")

    def __init__(
        self,
        service: ParkingService,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None
    ):
        self.service = service
        self.processor = CommandProcessor(service)
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.logger = logging.getLogger(self.__class__.__name__)

    # ========================================================================
    # I/O HELPERS
    # ========================================================================

    def _print(self, text: str = "") -> None:
        self.stdout.write(f"{text}\n")

    def _prompt(self, text: str) -> Optional[str]:
        """Show a prompt and read one line; None at end of input"""
        self.stdout.write(text)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    # ========================================================================
    # SESSION LOOP
    # ========================================================================

    def run(self) -> int:
        """Run the session; returns a process exit code"""
        lot_name = self.service.parking_lot.name
        self._print(f"Welcome to {lot_name} Parking System")

        role_input = self._prompt("Are you an ADMIN or USER? (Enter ADMIN/USER): ")
        try:
            role = Role((role_input or "").strip().upper())
        except ValueError:
            self._print("Invalid role. Exiting.")
            return 1

        self.logger.info(f"Session started as {role.value}")
        menu = self.USER_MENU if role == Role.USER else self.ADMIN_MENU
        handlers = self._user_actions() if role == Role.USER else self._admin_actions()

        while True:
            self._print()
            self._print(f"--- {role.value} Menu ---")
            for entry in menu:
                self._print(entry)

            choice = self._prompt("Enter choice: ")
            if choice is None:
                self._print()
                self._print("Goodbye!")
                return 0

            action = handlers.get(choice.strip())
            if action is None:
                self._print("Invalid choice.")
                continue

            if action() is False:
                self._print("Goodbye!")
                return 0

    def _user_actions(self) -> Dict[str, Any]:
        return {"1": self.park_vehicle, "2": self.remove_vehicle, "3": lambda: False}

    def _admin_actions(self) -> Dict[str, Any]:
        return {"1": self.view_status, "2": self.view_revenue, "3": lambda: False}

    # ========================================================================
    # MENU ACTIONS
    # ========================================================================

    def park_vehicle(self) -> Optional[bool]:
        plate = self._prompt("Enter vehicle number: ")
        color = self._prompt("Enter vehicle color: ") if plate is not None else None
        vehicle_type = self._prompt("Enter vehicle type (CAR/BIKE/TRUCK): ") if color is not None else None
        if vehicle_type is None:
            return False

        result = self.processor.process(ParkVehicleCommand(plate, vehicle_type, color or None))
        if result.get("errors"):
            self._print_errors(result["errors"])
        elif result["success"]:
            self._print(f"Parked: {result['ticket_id']}")
        else:
            self._print(result["message"])
        return None

    def remove_vehicle(self) -> Optional[bool]:
        ticket_id = self._prompt("Enter ticket ID: ")
        hours = self._prompt("Enter hours parked: ") if ticket_id is not None else None
        if hours is None:
            return False

        result = self.processor.process(ExitVehicleCommand(ticket_id, hours.strip()))
        if result.get("errors"):
            self._print_errors(result["errors"])
        elif result["success"]:
            for line in result["exit"].receipt_lines():
                self._print(line)
            if result["exit"].warning:
                self._print(f"Warning: {result['exit'].warning}")
        else:
            self._print(result["message"])
        return None

    def view_status(self) -> None:
        status = self.processor.process(ViewAvailabilityCommand())["status"]
        for floor in status.floors:
            self._print(f"Floor {floor.floor_number}: {floor.available_slots} available slots")

    def view_revenue(self) -> None:
        report = self.processor.process(ViewRevenueCommand())["report"]
        self._print(f"Completed sessions: {report.completed_sessions}")
        for vehicle_type, amount in report.by_vehicle_type.items():
            self._print(f"{vehicle_type}: Rs. {amount:.1f}")
        self._print(f"Total revenue: Rs. {report.total_revenue:.1f}")

    def _print_errors(self, errors: List[str]) -> None:
        for error in errors:
            self._print(f"Invalid input: {error}")
