"""
Terminal appointment scheduling.
"""
from drayage.services.scheduling.capacity import (
    SlotCapacityProvider,
    UnlimitedCapacity,
    AppointmentCountCapacity,
)
from drayage.services.scheduling.gate_hours import (
    GateHoursProvider,
    ScheduleGateHours,
    RepositoryGateHours,
)
from drayage.services.scheduling.scheduler import AppointmentScheduler, APPOINTMENT_TRANSITIONS

__all__ = [
    "SlotCapacityProvider",
    "UnlimitedCapacity",
    "AppointmentCountCapacity",
    "GateHoursProvider",
    "ScheduleGateHours",
    "RepositoryGateHours",
    "AppointmentScheduler",
    "APPOINTMENT_TRANSITIONS",
]
