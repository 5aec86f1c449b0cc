from .reservation_service import ReservationService
from .availability_service import AvailabilityService
from .configuration_service import ConfigurationService

__all__ = [
    "ReservationService",
    "AvailabilityService",
    "ConfigurationService",
]
