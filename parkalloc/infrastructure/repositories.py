# File: parkalloc/infrastructure/repositories.py
"""
Repository Implementations for the Parking Allocator

Receipts issued during a session are kept in a ledger so the admin can
review revenue. Two implementations share one interface:
1. InMemoryReceiptLedger - plain Python list, used by tests
2. SQLAlchemyReceiptLedger - SQLAlchemy ORM, in-memory SQLite by default

The lot itself is never persisted; only the session's receipts are recorded.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Callable
from datetime import datetime
from decimal import Decimal
import logging

from sqlalchemy import Column, DateTime, Integer, Numeric, String, create_engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..domain.models import Receipt, Money, VehicleCategory


class LedgerError(Exception):
    """A receipt could not be written to or read from the ledger"""
    pass


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class ReceiptLedger(ABC):
    """Append-only record of the receipts issued by a lot"""

    @abstractmethod
    def add(self, receipt: Receipt) -> Receipt:
        """Record a receipt"""
        pass

    @abstractmethod
    def get_all(self, skip: int = 0, limit: int = 100) -> List[Receipt]:
        """Receipts in issue order, with pagination"""
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def total_revenue(self) -> Money:
        pass

    @abstractmethod
    def revenue_by_category(self) -> Dict[VehicleCategory, Money]:
        pass


# ============================================================================
# IN-MEMORY REPOSITORIES (For Testing)
# ============================================================================

class InMemoryReceiptLedger(ReceiptLedger):
    """In-memory ledger for testing"""

    def __init__(self):
        self._storage: List[Receipt] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    def add(self, receipt: Receipt) -> Receipt:
        self._storage.append(receipt)
        self._logger.debug(f"Recorded receipt {receipt.ticket_id}")
        return receipt

    def get_all(self, skip: int = 0, limit: int = 100) -> List[Receipt]:
        return self._storage[skip:skip + limit]

    def count(self) -> int:
        return len(self._storage)

    def total_revenue(self) -> Money:
        total = Money.zero()
        for receipt in self._storage:
            total = total + receipt.amount
        return total

    def revenue_by_category(self) -> Dict[VehicleCategory, Money]:
        totals = {category: Money.zero() for category in VehicleCategory}
        for receipt in self._storage:
            totals[receipt.category] = totals[receipt.category] + receipt.amount
        return totals

    def clear(self):
        """Clear all data (for testing)"""
        self._storage.clear()


# ============================================================================
# SQLALCHEMY ORM MODELS
# ============================================================================

Base = declarative_base()


class ReceiptModel(Base):
    """SQLAlchemy model for Receipt"""
    __tablename__ = 'receipts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(64), nullable=False, index=True)
    category = Column(String(10), nullable=False)
    license_plate = Column(String(64))
    hours = Column(Integer, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default='INR', nullable=False)
    issued_at = Column(DateTime, default=datetime.now, nullable=False)


class Mapper:
    """Maps between domain receipts and ORM rows"""

    @staticmethod
    def receipt_to_orm(receipt: Receipt) -> ReceiptModel:
        return ReceiptModel(
            ticket_id=receipt.ticket_id,
            category=receipt.category.value,
            license_plate=receipt.license_plate,
            hours=receipt.hours,
            amount=receipt.amount.amount,
            currency=receipt.amount.currency
        )

    @staticmethod
    def receipt_to_domain(model: ReceiptModel) -> Receipt:
        return Receipt(
            ticket_id=model.ticket_id,
            category=VehicleCategory(model.category),
            hours=model.hours,
            amount=Money(Decimal(str(model.amount)), model.currency),
            license_plate=model.license_plate
        )


# ============================================================================
# SQLALCHEMY REPOSITORIES
# ============================================================================

class SQLAlchemyReceiptLedger(ReceiptLedger):
    """Receipt ledger backed by a SQLAlchemy session factory"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self._logger = logging.getLogger(self.__class__.__name__)

    def add(self, receipt: Receipt) -> Receipt:
        with self.session_factory() as session:
            try:
                model = Mapper.receipt_to_orm(receipt)
                session.add(model)
                session.commit()
                self._logger.debug(f"Recorded receipt {receipt.ticket_id} (row {model.id})")
                return receipt
            except SQLAlchemyError as e:
                session.rollback()
                self._logger.error(f"Database error recording receipt {receipt.ticket_id}: {e}")
                raise

    def get_all(self, skip: int = 0, limit: int = 100) -> List[Receipt]:
        with self.session_factory() as session:
            try:
                models = (
                    session.query(ReceiptModel)
                    .order_by(ReceiptModel.id)
                    .offset(skip)
                    .limit(limit)
                    .all()
                )
                return [Mapper.receipt_to_domain(model) for model in models]
            except SQLAlchemyError as e:
                self._logger.error(f"Database error listing receipts: {e}")
                raise

    def count(self) -> int:
        with self.session_factory() as session:
            try:
                return session.query(ReceiptModel).count()
            except SQLAlchemyError as e:
                self._logger.error(f"Database error counting receipts: {e}")
                raise

    def total_revenue(self) -> Money:
        with self.session_factory() as session:
            try:
                total = session.query(func.sum(ReceiptModel.amount)).scalar()
            except SQLAlchemyError as e:
                self._logger.error(f"Database error summing revenue: {e}")
                raise
        return Money(Decimal(str(total or 0)))

    def revenue_by_category(self) -> Dict[VehicleCategory, Money]:
        totals = {category: Money.zero() for category in VehicleCategory}
        with self.session_factory() as session:
            try:
                rows = (
                    session.query(ReceiptModel.category, func.sum(ReceiptModel.amount))
                    .group_by(ReceiptModel.category)
                    .all()
                )
            except SQLAlchemyError as e:
                self._logger.error(f"Database error grouping revenue: {e}")
                raise
        for category, amount in rows:
            totals[VehicleCategory(category)] = Money(Decimal(str(amount or 0)))
        return totals


# ============================================================================
# REPOSITORY FACTORY
# ============================================================================

class RepositoryFactory:
    """Factory for creating ledgers"""

    @staticmethod
    def create_in_memory_ledger() -> InMemoryReceiptLedger:
        return InMemoryReceiptLedger()

    @staticmethod
    def create_sqlalchemy_ledger(database_url: str) -> SQLAlchemyReceiptLedger:
        """Create a SQLAlchemy ledger, creating its table if needed"""
        engine_kwargs = {"echo": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # Every session must see the same in-memory database
            engine_kwargs.update(
                connect_args={"check_same_thread": False},
                poolclass=StaticPool
            )
        engine = create_engine(database_url, **engine_kwargs)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        Base.metadata.create_all(bind=engine)

        return SQLAlchemyReceiptLedger(SessionLocal)
