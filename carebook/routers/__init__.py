# Routers package
from . import appointments_router
from . import notifications_router

__all__ = [
    "appointments_router",
    "notifications_router",
]
