from fastapi import APIRouter
from .reservation_routes import router as reservation_router
from .staff_reservation_routes import router as staff_router
from .admin_routes import router as admin_router

# Create main router
router = APIRouter(prefix="/reservations")

# Fixed-path sub-routers first so they win over "/{reservation_id}"
router.include_router(staff_router, prefix="/staff", tags=["Staff Reservations"])
router.include_router(admin_router, prefix="/admin", tags=["Reservation Administration"])
router.include_router(reservation_router, tags=["Reservations"])

__all__ = ["router"]
