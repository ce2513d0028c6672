#!/usr/bin/env python3
"""
Domain Layer Unit Tests

Tests for value objects and the parking slot entity.
"""

import unittest
from decimal import Decimal

from parkalloc.domain.models import (
    LicensePlate, Money, TicketId, TicketFormatError, SlotLayout,
    VehicleCategory, Vehicle, ParkingSlot, InvalidTicketReason, Receipt
)


class TestVehicleCategory(unittest.TestCase):
    """Unit tests for VehicleCategory"""

    def test_parse_is_case_insensitive(self):
        self.assertEqual(VehicleCategory.parse("car"), VehicleCategory.CAR)
        self.assertEqual(VehicleCategory.parse(" Bike "), VehicleCategory.BIKE)
        self.assertEqual(VehicleCategory.parse("TRUCK"), VehicleCategory.TRUCK)

    def test_parse_rejects_unknown(self):
        with self.assertRaises(ValueError):
            VehicleCategory.parse("VAN")
        with self.assertRaises(ValueError):
            VehicleCategory.parse("")

    def test_base_rates(self):
        self.assertEqual(VehicleCategory.CAR.base_rate, Decimal('40'))
        self.assertEqual(VehicleCategory.BIKE.base_rate, Decimal('20'))
        self.assertEqual(VehicleCategory.TRUCK.base_rate, Decimal('60'))


class TestLicensePlate(unittest.TestCase):
    """Unit tests for LicensePlate value object"""

    def test_normalizes_value(self):
        self.assertEqual(LicensePlate("  ka01ab1234 ").value, "KA01AB1234")

    def test_rejects_empty(self):
        with self.assertRaises(ValueError):
            LicensePlate("")
        with self.assertRaises(ValueError):
            LicensePlate("   ")

    def test_accepts_any_non_empty_text(self):
        self.assertEqual(LicensePlate("ka.01.ab.1234").value, "KA.01.AB.1234")
        self.assertEqual(LicensePlate("MH12/AB/1234567890").value, "MH12/AB/1234567890")
        self.assertEqual(LicensePlate("ab_12").value, "AB_12")

    def test_is_immutable(self):
        plate = LicensePlate("AB-12")
        with self.assertRaises(AttributeError):
            plate.value = "CD-34"


class TestMoney(unittest.TestCase):
    """Unit tests for Money value object"""

    def test_addition(self):
        total = Money(Decimal('40')) + Money(Decimal('10'))
        self.assertEqual(total.amount, Decimal('50'))
        self.assertEqual(total.currency, "INR")

    def test_rejects_negative(self):
        with self.assertRaises(ValueError):
            Money(Decimal('-1'))

    def test_rejects_mixed_currencies(self):
        with self.assertRaises(ValueError):
            Money(Decimal('1'), "INR") + Money(Decimal('1'), "USD")

    def test_format_matches_receipt(self):
        self.assertEqual(Money(Decimal('50')).format(), "Rs. 50.0")

    def test_accepts_int_amount(self):
        self.assertEqual(Money(30).amount, Decimal('30'))


class TestTicketId(unittest.TestCase):
    """Unit tests for ticket id encoding and decoding"""

    def test_str_encoding(self):
        self.assertEqual(str(TicketId("NITHYA", 2, 7)), "NITHYA_2_7")

    def test_parse_valid(self):
        ticket = TicketId.parse("L_1_4", "L")
        self.assertEqual(ticket, TicketId("L", 1, 4))

    def test_parse_lot_name_with_separator(self):
        ticket = TicketId.parse("MY_LOT_3_9", "MY_LOT")
        self.assertEqual((ticket.floor_number, ticket.slot_number), (3, 9))

    def test_parse_rejects_malformed(self):
        for text in ["BADFORMAT", "L_1", "L_1_2_3", "L_a_2", "L__2", "X_1_2",
                     "L_-1_2", "L_+1_2", "L_1_ 2", "", "L_١_2"]:
            with self.subTest(text=text):
                with self.assertRaises(TicketFormatError):
                    TicketId.parse(text, "L")

    def test_parse_error_is_value_error(self):
        with self.assertRaises(ValueError):
            TicketId.parse("nope", "L")


class TestSlotLayout(unittest.TestCase):
    """Unit tests for SlotLayout configuration tables"""

    def test_standard_layout(self):
        layout = SlotLayout.standard(5)
        self.assertEqual(
            layout.categories,
            (VehicleCategory.TRUCK, VehicleCategory.BIKE, VehicleCategory.BIKE,
             VehicleCategory.CAR, VehicleCategory.CAR)
        )

    def test_standard_layout_of_ten(self):
        layout = SlotLayout.standard(10)
        self.assertEqual(len(layout), 10)
        self.assertEqual(layout.count(VehicleCategory.TRUCK), 1)
        self.assertEqual(layout.count(VehicleCategory.BIKE), 2)
        self.assertEqual(layout.count(VehicleCategory.CAR), 7)

    def test_small_standard_layout(self):
        self.assertEqual(SlotLayout.standard(1).categories, (VehicleCategory.TRUCK,))
        with self.assertRaises(ValueError):
            SlotLayout.standard(0)

    def test_from_names(self):
        layout = SlotLayout.from_names(["car", "CAR", "bike"])
        self.assertEqual(layout.count(VehicleCategory.CAR), 2)

    def test_rejects_empty_or_bad_entries(self):
        with self.assertRaises(ValueError):
            SlotLayout(())
        with self.assertRaises(ValueError):
            SlotLayout(("CAR",))


class TestParkingSlot(unittest.TestCase):
    """Unit tests for ParkingSlot entity"""

    def setUp(self):
        self.slot = ParkingSlot(4, VehicleCategory.CAR)
        self.car = Vehicle.create("KA-01", VehicleCategory.CAR, "red")

    def test_fits_matching_free_slot(self):
        self.assertTrue(self.slot.fits(VehicleCategory.CAR))
        self.assertFalse(self.slot.fits(VehicleCategory.BIKE))

    def test_assign_sets_occupant_and_ticket_together(self):
        ticket = TicketId("L", 1, 4)
        returned = self.slot.assign(self.car, ticket)

        self.assertEqual(returned, ticket)
        self.assertTrue(self.slot.is_occupied)
        self.assertEqual(self.slot.occupant, self.car)
        self.assertEqual(self.slot.ticket, ticket)
        self.assertFalse(self.slot.fits(VehicleCategory.CAR))

    def test_release_clears_both(self):
        self.slot.assign(self.car, TicketId("L", 1, 4))
        self.slot.release()

        self.assertIsNone(self.slot.occupant)
        self.assertIsNone(self.slot.ticket)
        self.assertTrue(self.slot.fits(VehicleCategory.CAR))

    def test_slot_number_must_be_positive(self):
        with self.assertRaises(ValueError):
            ParkingSlot(0, VehicleCategory.CAR)

    def test_to_dict(self):
        self.slot.assign(self.car, TicketId("L", 1, 4))
        data = self.slot.to_dict()
        self.assertEqual(data["ticket_id"], "L_1_4")
        self.assertEqual(data["license_plate"], "KA-01")
        self.assertTrue(data["is_occupied"])


class TestVehicleAndOutcomes(unittest.TestCase):
    """Unit tests for vehicles, receipts and failure reasons"""

    def test_vehicle_create_from_name(self):
        vehicle = Vehicle.create("ab 12", "bike", " blue ")
        self.assertEqual(vehicle.category, VehicleCategory.BIKE)
        self.assertEqual(str(vehicle.license_plate), "AB 12")
        self.assertEqual(vehicle.color, "blue")

    def test_receipt_lines(self):
        receipt = Receipt("L_1_4", VehicleCategory.CAR, 2, Money(Decimal('50')))
        self.assertEqual(receipt.lines(), (
            "Ticket ID: L_1_4",
            "Vehicle Type: CAR",
            "Hours Parked: 2",
            "Amount: Rs. 50.0",
        ))

    def test_reason_messages(self):
        self.assertEqual(InvalidTicketReason.MALFORMED_ID.message, "Invalid Ticket ID.")
        self.assertEqual(InvalidTicketReason.FLOOR_OUT_OF_RANGE.message, "Invalid floor.")
        self.assertEqual(InvalidTicketReason.SLOT_OUT_OF_RANGE.message, "Invalid slot.")
        self.assertEqual(InvalidTicketReason.NO_ACTIVE_TICKET.message, "Ticket not found.")


if __name__ == '__main__':
    unittest.main()
