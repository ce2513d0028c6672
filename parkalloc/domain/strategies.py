# File: parkalloc/domain/strategies.py
"""
Strategy Pattern Implementation for the Parking Allocator

Encapsulates the two algorithms the parking lot delegates to:
1. Allocation Strategies - which free slot a vehicle receives
2. Pricing Strategies - how much a completed stay costs

Strategies can be swapped when the lot is built without touching the
aggregate itself.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Tuple, Sequence, TYPE_CHECKING
from decimal import Decimal
import logging

from .models import ParkingSlot, Vehicle, VehicleCategory, Money

if TYPE_CHECKING:
    from .aggregates import Floor


# ============================================================================
# STRATEGY INTERFACES
# ============================================================================

class AllocationStrategy(ABC):
    """
    Abstract base class for allocation strategies
    Defines the interface for slot search algorithms
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def allocate_slot(
        self,
        floors: Sequence['Floor'],
        vehicle: Vehicle
    ) -> Optional[Tuple['Floor', ParkingSlot]]:
        """
        Pick a floor and a free slot for the vehicle
        Returns: (floor, slot) if available, None otherwise
        """
        pass

    def get_strategy_name(self) -> str:
        """Get human-readable strategy name"""
        return self.__class__.__name__.replace("Strategy", "")

    def __str__(self) -> str:
        return f"{self.get_strategy_name()} Strategy"


class PricingStrategy(ABC):
    """
    Abstract base class for pricing strategies
    Defines the interface for fee calculation algorithms
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def calculate_fee(self, category: VehicleCategory, hours: int) -> Money:
        """
        Calculate the fee for a stay of ``hours`` hours
        Raises: ValueError for negative hours
        """
        pass


# ============================================================================
# ALLOCATION STRATEGIES
# ============================================================================

class FirstFitStrategy(AllocationStrategy):
    """
    Strategy: lowest floor first, then lowest slot number on that floor
    Deterministic: repeated calls without intervening mutation return the same slot
    """

    def allocate_slot(
        self,
        floors: Sequence['Floor'],
        vehicle: Vehicle
    ) -> Optional[Tuple['Floor', ParkingSlot]]:
        for floor in floors:
            slot = floor.find_first_fit(vehicle.category)
            if slot is not None:
                self.logger.debug(
                    f"First fit for {vehicle}: floor {floor.number}, slot {slot.number}"
                )
                return floor, slot
        return None


# ============================================================================
# PRICING STRATEGIES
# ============================================================================

class StandardPricingStrategy(PricingStrategy):
    """
    Strategy: category base rate for the first hour plus a flat rate per extra hour

    ``amount = base`` when ``hours == 1`` and ``base + (hours - 1) * extra``
    otherwise, so a zero-hour stay is charged one extra-hour step below base.
    """

    DEFAULT_EXTRA_HOUR_RATE = Decimal('10')

    def __init__(
        self,
        base_rates: Optional[Dict[VehicleCategory, Decimal]] = None,
        extra_hour_rate: Decimal = DEFAULT_EXTRA_HOUR_RATE,
        currency: str = "INR"
    ):
        super().__init__()
        self.base_rates = base_rates or {category: category.base_rate for category in VehicleCategory}
        self.extra_hour_rate = Decimal(extra_hour_rate)
        self.currency = currency

        if self.extra_hour_rate < 0:
            raise ValueError(f"Extra hour rate cannot be negative: {self.extra_hour_rate}")
        for category in VehicleCategory:
            if category not in self.base_rates:
                raise ValueError(f"No base rate for {category}")
            # A zero-hour stay costs base - extra, which must not go below zero
            if self.base_rates[category] < self.extra_hour_rate:
                raise ValueError(
                    f"Base rate for {category} ({self.base_rates[category]}) is below "
                    f"the extra hour rate ({self.extra_hour_rate})"
                )

    def calculate_fee(self, category: VehicleCategory, hours: int) -> Money:
        if hours < 0:
            raise ValueError(f"Hours parked cannot be negative: {hours}")

        base = self.base_rates[category]
        if hours == 1:
            amount = base
        else:
            amount = base + (hours - 1) * self.extra_hour_rate

        self.logger.debug(f"Fee for {category} over {hours}h: {amount}")
        return Money(amount, self.currency)


_default_pricing = StandardPricingStrategy()


def fee(category: VehicleCategory, hours: int) -> Money:
    """Price a stay with the standard rate table"""
    return _default_pricing.calculate_fee(category, hours)
