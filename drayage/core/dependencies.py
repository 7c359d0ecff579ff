"""FastAPI dependencies."""
from fastapi import Request

from drayage.services.lifecycle import LifecycleCoordinator


def get_coordinator(request: Request) -> LifecycleCoordinator:
    """Dependency returning the coordinator built at application startup.

    Usage:
        @router.get("/orders/{order_id}")
        async def get_order(
            order_id: UUID,
            coordinator: LifecycleCoordinator = Depends(get_coordinator),
        ):
            ...
    """
    return request.app.state.coordinator
