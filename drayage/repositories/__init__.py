"""
Repository contracts and implementations.
"""
from drayage.repositories.base import (
    ShipmentRepository,
    ContainerRepository,
    OrderRepository,
    AppointmentRepository,
    GateHoursRepository,
    UnitOfWork,
)
from drayage.repositories.memory import MemoryStore, MemoryUnitOfWork, MemoryUnitOfWorkFactory
from drayage.repositories.sql import SqlUnitOfWork

__all__ = [
    "ShipmentRepository",
    "ContainerRepository",
    "OrderRepository",
    "AppointmentRepository",
    "GateHoursRepository",
    "UnitOfWork",
    "MemoryStore",
    "MemoryUnitOfWork",
    "MemoryUnitOfWorkFactory",
    "SqlUnitOfWork",
]
