"""
Repository contracts and the unit of work.

The lifecycle coordinator depends only on these abstract classes. Two
implementations ship with the package: SQLAlchemy (sql.py) and an
in-process store (memory.py).
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from drayage.models.appointment import TerminalAppointment
from drayage.models.container import Container
from drayage.models.order import Order
from drayage.models.shipment import Shipment
from drayage.models.terminal import TerminalGateHours
from drayage.schemas.order import OrderFilter


class ShipmentRepository(ABC):

    @abstractmethod
    async def get(self, shipment_id: UUID) -> Optional[Shipment]: ...

    @abstractmethod
    async def create(self, shipment: Shipment) -> Shipment: ...

    @abstractmethod
    async def update(self, shipment: Shipment) -> Shipment: ...


class ContainerRepository(ABC):

    @abstractmethod
    async def get(self, container_id: UUID) -> Optional[Container]: ...

    @abstractmethod
    async def get_for_update(self, container_id: UUID) -> Optional[Container]:
        """Fetch and lock the row until the unit of work ends."""

    @abstractmethod
    async def get_by_shipment(self, shipment_id: UUID) -> list[Container]: ...

    @abstractmethod
    async def create(self, container: Container) -> Container: ...


class OrderRepository(ABC):

    @abstractmethod
    async def get(self, order_id: UUID) -> Optional[Order]: ...

    @abstractmethod
    async def get_for_update(self, order_id: UUID) -> Optional[Order]:
        """Fetch and lock the row until the unit of work ends."""

    @abstractmethod
    async def create(self, order: Order) -> Order: ...

    @abstractmethod
    async def update(self, order: Order) -> Order: ...

    @abstractmethod
    async def get_active_by_container(self, container_id: UUID) -> Optional[Order]:
        """The container's order that is not COMPLETED, CANCELLED or FAILED."""

    @abstractmethod
    async def list(self, filter: OrderFilter) -> tuple[list[Order], int]:
        """One page of matching orders and the total match count."""

    @abstractmethod
    async def next_order_number(self, now: datetime) -> str:
        """Allocate a unique ORD-YYYYMMDD-NNNNN number."""


class AppointmentRepository(ABC):

    @abstractmethod
    async def get(self, appointment_id: UUID) -> Optional[TerminalAppointment]: ...

    @abstractmethod
    async def create(self, appointment: TerminalAppointment) -> TerminalAppointment: ...

    @abstractmethod
    async def update(self, appointment: TerminalAppointment) -> TerminalAppointment: ...

    @abstractmethod
    async def get_by_order(self, order_id: UUID) -> list[TerminalAppointment]:
        """All appointments of an order, oldest first."""

    @abstractmethod
    async def get_by_terminal_and_time_range(
        self,
        terminal_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[TerminalAppointment]:
        """Appointments whose window overlaps [start, end), ordered by window start."""


class GateHoursRepository(ABC):

    @abstractmethod
    async def get_for_terminal(self, terminal_id: UUID) -> list[TerminalGateHours]: ...


class UnitOfWork(ABC):
    """
    Transaction boundary around the repositories.

    Usage:
        async with uow:
            order = await uow.orders.get_for_update(order_id)
            ...
            await uow.commit()

    Leaving the block without commit(), or with an exception, rolls back.
    """

    shipments: ShipmentRepository
    containers: ContainerRepository
    orders: OrderRepository
    appointments: AppointmentRepository
    gate_hours: GateHoursRepository

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self.committed:
            await self.rollback()

    @property
    @abstractmethod
    def committed(self) -> bool: ...

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...


def order_number(day: datetime, sequence: int) -> str:
    return f"ORD-{day.strftime('%Y%m%d')}-{sequence:05d}"
