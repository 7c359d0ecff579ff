"""
SQLAlchemy 2.0 async repositories.

Row locks (SELECT ... FOR UPDATE) taken by get_for_update last until the
unit of work commits or rolls back.
"""
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from sqlalchemy import Sequence, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from drayage.db.database import Base, async_session_maker
from drayage.models.appointment import TerminalAppointment
from drayage.models.container import Container
from drayage.models.enums import OrderStatus
from drayage.models.order import Order
from drayage.models.shipment import Shipment
from drayage.models.terminal import TerminalGateHours
from drayage.repositories.base import (
    AppointmentRepository,
    ContainerRepository,
    GateHoursRepository,
    OrderRepository,
    ShipmentRepository,
    UnitOfWork,
    order_number,
)
from drayage.schemas.order import OrderFilter

order_number_seq = Sequence("order_number_seq", metadata=Base.metadata)

TERMINAL_ORDER_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.FAILED)


class _SqlRepository:
    model: type

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, entity_id: UUID) -> Optional[Any]:
        return await self.session.get(self.model, entity_id)

    async def create(self, entity: Any) -> Any:
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, entity: Any) -> Any:
        await self.session.flush()
        return entity

    async def _locked(self, entity_id: UUID) -> Optional[Any]:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


class SqlShipmentRepository(_SqlRepository, ShipmentRepository):
    model = Shipment


class SqlContainerRepository(_SqlRepository, ContainerRepository):
    model = Container

    async def get_for_update(self, container_id: UUID) -> Optional[Container]:
        return await self._locked(container_id)

    async def get_by_shipment(self, shipment_id: UUID) -> list[Container]:
        result = await self.session.execute(
            select(Container)
            .where(Container.shipment_id == shipment_id)
            .order_by(Container.container_number)
        )
        return list(result.scalars().all())


class SqlOrderRepository(_SqlRepository, OrderRepository):
    model = Order

    async def get_for_update(self, order_id: UUID) -> Optional[Order]:
        return await self._locked(order_id)

    async def get_active_by_container(self, container_id: UUID) -> Optional[Order]:
        result = await self.session.execute(
            select(Order)
            .where(Order.container_id == container_id)
            .where(Order.status.not_in(TERMINAL_ORDER_STATUSES))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def next_order_number(self, now: datetime) -> str:
        sequence = await self.session.scalar(select(order_number_seq.next_value()))
        return order_number(now, sequence)

    async def list(self, filter: OrderFilter) -> tuple[list[Order], int]:
        conditions = []
        if filter.status:
            conditions.append(Order.status.in_([OrderStatus(s) for s in filter.status]))
        if filter.type:
            conditions.append(Order.type == filter.type)
        if filter.billing_status:
            conditions.append(Order.billing_status == filter.billing_status)
        if filter.shipment_id:
            conditions.append(Order.shipment_id == filter.shipment_id)
        if filter.container_id:
            conditions.append(Order.container_id == filter.container_id)

        query = (
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc(), Order.order_number.desc())
            .offset(filter.offset)
            .limit(filter.page_size)
        )
        result = await self.session.execute(query)

        total = await self.session.scalar(select(func.count(Order.id)).where(*conditions))
        return list(result.scalars().all()), total or 0


class SqlAppointmentRepository(_SqlRepository, AppointmentRepository):
    model = TerminalAppointment

    async def get_by_order(self, order_id: UUID) -> list[TerminalAppointment]:
        result = await self.session.execute(
            select(TerminalAppointment)
            .where(TerminalAppointment.order_id == order_id)
            .order_by(TerminalAppointment.created_at)
        )
        return list(result.scalars().all())

    async def get_by_terminal_and_time_range(
        self,
        terminal_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[TerminalAppointment]:
        result = await self.session.execute(
            select(TerminalAppointment)
            .where(TerminalAppointment.terminal_id == terminal_id)
            .where(TerminalAppointment.window_start < end)
            .where(TerminalAppointment.window_end > start)
            .order_by(TerminalAppointment.window_start)
        )
        return list(result.scalars().all())


class SqlGateHoursRepository(GateHoursRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_terminal(self, terminal_id: UUID) -> list[TerminalGateHours]:
        result = await self.session.execute(
            select(TerminalGateHours).where(TerminalGateHours.terminal_id == terminal_id)
        )
        return list(result.scalars().all())


class SqlUnitOfWork(UnitOfWork):
    """
    Unit of work over one AsyncSession.

    Opens its own session from session_factory on entry and closes it on
    exit.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession] = async_session_maker):
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None
        self._committed = False

    async def __aenter__(self) -> "SqlUnitOfWork":
        self.session = self._session_factory()
        self._committed = False
        self.shipments = SqlShipmentRepository(self.session)
        self.containers = SqlContainerRepository(self.session)
        self.orders = SqlOrderRepository(self.session)
        self.appointments = SqlAppointmentRepository(self.session)
        self.gate_hours = SqlGateHoursRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self.session.close()

    @property
    def committed(self) -> bool:
        return self._committed

    async def commit(self) -> None:
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        await self.session.rollback()
