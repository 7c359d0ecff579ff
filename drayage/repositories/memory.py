"""
In-process repositories.

MemoryStore holds committed rows and outlives any single unit of work.
A MemoryUnitOfWork stages created rows until commit and snapshots every
existing row it hands out, so rollback() restores in-place mutations as
well as discarding new rows. The order number sequence is never rolled
back, like a database sequence.
"""
import itertools
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from drayage.models.appointment import TerminalAppointment
from drayage.models.container import Container
from drayage.models.enums import OrderStatus
from drayage.models.order import Order
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


class MemoryStore:
    """Committed state shared by all units of work."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[UUID, Any]] = {
            "shipments": {},
            "containers": {},
            "orders": {},
            "appointments": {},
        }
        self.gate_hours: dict[UUID, list[TerminalGateHours]] = {}
        self._order_sequence = itertools.count(1)

    def next_sequence(self) -> int:
        return next(self._order_sequence)

    def add_gate_hours(self, rows: list[TerminalGateHours]) -> None:
        for row in rows:
            self.gate_hours.setdefault(row.terminal_id, []).append(row)


class _MemoryRepository:
    table: str

    def __init__(self, uow: "MemoryUnitOfWork"):
        self._uow = uow

    def _rows(self) -> list[Any]:
        committed = self._uow.store.tables[self.table]
        staged = self._uow.staged[self.table]
        return [self._uow.track(row) for row in committed.values()] + list(staged.values())

    async def get(self, entity_id: UUID) -> Optional[Any]:
        staged = self._uow.staged[self.table].get(entity_id)
        if staged is not None:
            return staged
        row = self._uow.store.tables[self.table].get(entity_id)
        return self._uow.track(row) if row is not None else None

    async def create(self, entity: Any) -> Any:
        self._uow.staged[self.table][entity.id] = entity
        return entity

    async def update(self, entity: Any) -> Any:
        # Rows are shared objects; mutations were snapshotted on first read
        return entity


class MemoryShipmentRepository(_MemoryRepository, ShipmentRepository):
    table = "shipments"


class MemoryContainerRepository(_MemoryRepository, ContainerRepository):
    table = "containers"

    async def get_for_update(self, container_id: UUID) -> Optional[Container]:
        return await self.get(container_id)

    async def get_by_shipment(self, shipment_id: UUID) -> list[Container]:
        rows = [c for c in self._rows() if c.shipment_id == shipment_id]
        return sorted(rows, key=lambda c: c.container_number)


class MemoryOrderRepository(_MemoryRepository, OrderRepository):
    table = "orders"

    async def get_for_update(self, order_id: UUID) -> Optional[Order]:
        return await self.get(order_id)

    async def get_active_by_container(self, container_id: UUID) -> Optional[Order]:
        for order in self._rows():
            if order.container_id == container_id and not order.status.is_terminal:
                return order
        return None

    async def next_order_number(self, now: datetime) -> str:
        return order_number(now, self._uow.store.next_sequence())

    async def list(self, filter: OrderFilter) -> tuple[list[Order], int]:
        statuses = {OrderStatus(s) for s in filter.status} if filter.status else None
        matches = [
            o for o in self._rows()
            if (statuses is None or o.status in statuses)
            and (filter.type is None or o.type == filter.type)
            and (filter.billing_status is None or o.billing_status == filter.billing_status)
            and (filter.shipment_id is None or o.shipment_id == filter.shipment_id)
            and (filter.container_id is None or o.container_id == filter.container_id)
        ]
        matches.sort(key=lambda o: (o.created_at, o.order_number), reverse=True)
        return matches[filter.offset:filter.offset + filter.page_size], len(matches)


class MemoryAppointmentRepository(_MemoryRepository, AppointmentRepository):
    table = "appointments"

    async def get_by_order(self, order_id: UUID) -> list[TerminalAppointment]:
        rows = [a for a in self._rows() if a.order_id == order_id]
        return sorted(rows, key=lambda a: a.created_at)

    async def get_by_terminal_and_time_range(
        self,
        terminal_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[TerminalAppointment]:
        rows = [
            a for a in self._rows()
            if a.terminal_id == terminal_id and a.window_start < end and a.window_end > start
        ]
        return sorted(rows, key=lambda a: a.window_start)


class MemoryGateHoursRepository(GateHoursRepository):

    def __init__(self, store: MemoryStore):
        self._store = store

    async def get_for_terminal(self, terminal_id: UUID) -> list[TerminalGateHours]:
        return list(self._store.gate_hours.get(terminal_id, []))


class MemoryUnitOfWork(UnitOfWork):
    """Unit of work over a MemoryStore."""

    def __init__(self, store: MemoryStore):
        self.store = store
        self.staged: dict[str, dict[UUID, Any]] = {name: {} for name in store.tables}
        self._snapshots: dict[int, tuple[Any, dict[str, Any]]] = {}
        self._committed = False

        self.shipments = MemoryShipmentRepository(self)
        self.containers = MemoryContainerRepository(self)
        self.orders = MemoryOrderRepository(self)
        self.appointments = MemoryAppointmentRepository(self)
        self.gate_hours = MemoryGateHoursRepository(store)

    @property
    def committed(self) -> bool:
        return self._committed

    def track(self, row: Any) -> Any:
        """Snapshot a committed row the first time this unit of work sees it."""
        key = id(row)
        if key not in self._snapshots:
            state = {k: v for k, v in vars(row).items() if not k.startswith("_sa_")}
            self._snapshots[key] = (row, state)
        return row

    async def commit(self) -> None:
        for name, rows in self.staged.items():
            self.store.tables[name].update(rows)
            rows.clear()
        self._snapshots.clear()
        self._committed = True

    async def rollback(self) -> None:
        for row, state in self._snapshots.values():
            current = {k: v for k, v in vars(row).items() if not k.startswith("_sa_")}
            if current == state:
                continue
            for key, value in state.items():
                setattr(row, key, value)
            for key in [k for k in vars(row) if not k.startswith("_sa_") and k not in state]:
                setattr(row, key, None)
        self._snapshots.clear()
        for rows in self.staged.values():
            rows.clear()


class MemoryUnitOfWorkFactory:
    """Callable producing a fresh MemoryUnitOfWork over one shared store."""

    def __init__(self, store: Optional[MemoryStore] = None):
        self.store = store or MemoryStore()

    def __call__(self) -> MemoryUnitOfWork:
        return MemoryUnitOfWork(self.store)
