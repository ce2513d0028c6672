#!/usr/bin/env python3
"""
Strategy Pattern Unit Tests

Tests for slot allocation and fee calculation strategies.
"""

import unittest
from decimal import Decimal

from parkalloc.domain.models import Vehicle, VehicleCategory, SlotLayout, TicketId, Money
from parkalloc.domain.aggregates import Floor
from parkalloc.domain.strategies import (
    FirstFitStrategy, StandardPricingStrategy, PricingStrategy, fee
)


class TestStandardPricing(unittest.TestCase):
    """Fee table: base rate for the first hour, 10 per extra hour"""

    def test_one_hour_is_base_rate(self):
        self.assertEqual(fee(VehicleCategory.CAR, 1).amount, Decimal('40'))
        self.assertEqual(fee(VehicleCategory.BIKE, 1).amount, Decimal('20'))
        self.assertEqual(fee(VehicleCategory.TRUCK, 1).amount, Decimal('60'))

    def test_extra_hours(self):
        self.assertEqual(fee(VehicleCategory.CAR, 3).amount, Decimal('60'))
        self.assertEqual(fee(VehicleCategory.TRUCK, 2).amount, Decimal('70'))
        self.assertEqual(fee(VehicleCategory.BIKE, 5).amount, Decimal('60'))

    def test_zero_hours_is_one_step_below_base(self):
        self.assertEqual(fee(VehicleCategory.CAR, 0).amount, Decimal('30'))
        self.assertEqual(fee(VehicleCategory.BIKE, 0).amount, Decimal('10'))
        self.assertEqual(fee(VehicleCategory.TRUCK, 0).amount, Decimal('50'))

    def test_each_hour_adds_ten(self):
        for category in VehicleCategory:
            for hours in range(1, 24):
                with self.subTest(category=category, hours=hours):
                    step = fee(category, hours + 1).amount - fee(category, hours).amount
                    self.assertEqual(step, Decimal('10'))

    def test_negative_hours_rejected(self):
        with self.assertRaises(ValueError):
            fee(VehicleCategory.CAR, -1)

    def test_currency_is_inr(self):
        self.assertEqual(fee(VehicleCategory.CAR, 2), Money(Decimal('50'), "INR"))

    def test_custom_rates(self):
        strategy = StandardPricingStrategy(
            base_rates={category: Decimal('100') for category in VehicleCategory},
            extra_hour_rate=Decimal('25')
        )
        self.assertIsInstance(strategy, PricingStrategy)
        self.assertEqual(strategy.calculate_fee(VehicleCategory.BIKE, 3).amount, Decimal('150'))

    def test_base_rate_below_extra_hour_rate_rejected(self):
        rates = {category: Decimal('40') for category in VehicleCategory}
        rates[VehicleCategory.BIKE] = Decimal('5')
        with self.assertRaises(ValueError):
            StandardPricingStrategy(base_rates=rates, extra_hour_rate=Decimal('10'))

    def test_base_rate_equal_to_extra_hour_rate_gives_free_zero_hour_stay(self):
        strategy = StandardPricingStrategy(
            base_rates={category: Decimal('10') for category in VehicleCategory}
        )
        self.assertEqual(strategy.calculate_fee(VehicleCategory.CAR, 0).amount, Decimal('0'))

    def test_missing_category_rate_rejected(self):
        with self.assertRaises(ValueError):
            StandardPricingStrategy(base_rates={VehicleCategory.CAR: Decimal('40')})


class TestFirstFitStrategy(unittest.TestCase):
    """Lowest floor first, then lowest slot"""

    def setUp(self):
        self.strategy = FirstFitStrategy()
        self.floors = [Floor(1, SlotLayout.standard(5)), Floor(2, SlotLayout.standard(5))]
        self.car = Vehicle.create("CAR-1", VehicleCategory.CAR)

    def test_picks_lowest_matching_slot(self):
        floor, slot = self.strategy.allocate_slot(self.floors, self.car)
        self.assertEqual((floor.number, slot.number), (1, 4))

    def test_is_deterministic_without_mutation(self):
        first = self.strategy.allocate_slot(self.floors, self.car)
        second = self.strategy.allocate_slot(self.floors, self.car)
        self.assertIs(first[1], second[1])

    def test_moves_to_next_floor_when_full(self):
        for number in (4, 5):
            self.floors[0].get_slot(number).assign(self.car, TicketId("L", 1, number))

        floor, slot = self.strategy.allocate_slot(self.floors, self.car)
        self.assertEqual((floor.number, slot.number), (2, 4))

    def test_returns_none_when_nothing_fits(self):
        truck = Vehicle.create("TRK-1", VehicleCategory.TRUCK)
        for floor in self.floors:
            floor.get_slot(1).assign(truck, TicketId("L", floor.number, 1))

        self.assertIsNone(self.strategy.allocate_slot(self.floors, truck))

    def test_strategy_name(self):
        self.assertEqual(self.strategy.get_strategy_name(), "FirstFit")


if __name__ == '__main__':
    unittest.main()
