"""
API v1 router aggregation.
"""
from fastapi import APIRouter

from drayage.api.v1.endpoints import shipments, orders, containers, appointments, terminals

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    shipments.router,
    prefix="/shipments",
    tags=["Shipments"],
)

api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"],
)

api_router.include_router(
    containers.router,
    prefix="/containers",
    tags=["Containers"],
)

api_router.include_router(
    appointments.router,
    prefix="/appointments",
    tags=["Appointments"],
)

api_router.include_router(
    terminals.router,
    prefix="/terminals",
    tags=["Terminals"],
)
