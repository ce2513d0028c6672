#!/usr/bin/env python3
"""
Messaging Unit Tests

Tests for the in-process event bus and the parking event handlers.
"""

import unittest
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from parkalloc.domain.models import (
    Receipt, Money, VehicleCategory, VehicleParkedEvent, VehicleLeftEvent
)
from parkalloc.infrastructure.messaging import (
    EventBus, EventHandler, ParkingEventHandler, BillingEventHandler
)
from parkalloc.infrastructure.repositories import InMemoryReceiptLedger, LedgerError


def parked_event():
    return VehicleParkedEvent("L", "L_1_4", "AB-12", VehicleCategory.CAR, 1, 4)


def left_event():
    receipt = Receipt("L_1_4", VehicleCategory.CAR, 2, Money(Decimal('50')), "AB-12")
    return VehicleLeftEvent("L", receipt)


class TestEventBus(unittest.TestCase):
    """Unit tests for EventBus"""

    def setUp(self):
        self.bus = EventBus()
        self.handler = Mock(spec=EventHandler)
        self.handler.can_handle.return_value = True

    def test_publish_reaches_subscriber(self):
        self.bus.subscribe("vehicle.parked", self.handler)
        event = parked_event()

        self.bus.publish(event)

        self.handler.handle.assert_called_once_with(event)

    def test_other_event_types_are_not_delivered(self):
        self.bus.subscribe("vehicle.left", self.handler)
        self.bus.publish(parked_event())
        self.handler.handle.assert_not_called()

    def test_subscribe_is_idempotent(self):
        self.bus.subscribe("vehicle.parked", self.handler)
        self.bus.subscribe("vehicle.parked", self.handler)
        self.assertEqual(self.bus.subscriber_count("vehicle.parked"), 1)

    def test_unsubscribe(self):
        self.bus.subscribe("vehicle.parked", self.handler)
        self.bus.unsubscribe("vehicle.parked", self.handler)
        self.bus.publish(parked_event())
        self.handler.handle.assert_not_called()

    def test_handler_errors_propagate(self):
        self.handler.handle.side_effect = RuntimeError("ledger down")
        self.bus.subscribe("vehicle.parked", self.handler)

        with self.assertRaises(RuntimeError):
            self.bus.publish(parked_event())

    def test_publish_all_keeps_order(self):
        self.bus.subscribe("vehicle.parked", self.handler)
        self.bus.subscribe("vehicle.left", self.handler)
        events = [parked_event(), left_event()]

        self.bus.publish_all(events)

        self.assertEqual([c.args[0] for c in self.handler.handle.call_args_list], events)

    def test_clear_subscribers(self):
        self.bus.subscribe("vehicle.parked", self.handler)
        self.bus.clear_subscribers()
        self.assertEqual(self.bus.subscriber_count("vehicle.parked"), 0)


class TestHandlers(unittest.TestCase):
    """Unit tests for the parking event handlers"""

    def test_billing_handler_records_receipt(self):
        ledger = InMemoryReceiptLedger()
        handler = BillingEventHandler(ledger)
        event = left_event()

        self.assertTrue(handler.can_handle(event))
        self.assertFalse(handler.can_handle(parked_event()))
        handler.handle(event)

        self.assertEqual(ledger.get_all(), [event.receipt])

    def test_billing_handler_wraps_storage_errors(self):
        ledger = Mock()
        ledger.add.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        handler = BillingEventHandler(ledger)

        with self.assertRaises(LedgerError) as ctx:
            handler.handle(left_event())

        self.assertIn("L_1_4", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, OperationalError)

    def test_audit_handler_logs(self):
        handler = ParkingEventHandler()
        with self.assertLogs("ParkingEventHandler", level="INFO") as logs:
            handler.handle(parked_event())
            handler.handle(left_event())

        self.assertIn("L_1_4", logs.output[0])
        self.assertIn("Rs. 50.0", logs.output[1])

    def test_event_serialization(self):
        data = left_event().to_dict()
        self.assertEqual(data["event_type"], "vehicle.left")
        self.assertEqual(data["data"]["ticket_id"], "L_1_4")
        self.assertEqual(data["data"]["amount"]["amount"], 50.0)


if __name__ == '__main__':
    unittest.main()
