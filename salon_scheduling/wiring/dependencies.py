from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from salon_scheduling.core.config import settings
from salon_scheduling.application.ports.appointment_store import AppointmentStorePort
from salon_scheduling.application.use_cases.appointment_book import AppointmentBook
from salon_scheduling.application.use_cases.appointment_lifecycle import AppointmentManager
from salon_scheduling.application.use_cases.availability import AvailabilityResolver, grid_from_settings
from salon_scheduling.application.use_cases.booking_wizard import BookingUseCase
from salon_scheduling.infrastructure.notifications.logging_notifier import LoggingNotifier
from salon_scheduling.infrastructure.salon_api.http_client import SalonApiClient
from salon_scheduling.infrastructure.salon_api.mock_backend import MockSalonBackend
from salon_scheduling.infrastructure.store.json_store import JsonAppointmentStore
from salon_scheduling.infrastructure.store.memory_store import MemoryAppointmentStore


@lru_cache
def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


@lru_cache
def get_salon_backend() -> MockSalonBackend | SalonApiClient:
    logger = logging.getLogger(__name__)
    if settings.SALON_BACKEND.lower() == "http":
        logger.info("Using SalonApiClient", extra={"base_url": settings.SALON_API_BASE_URL})
        return SalonApiClient()
    if settings.ENV.lower() not in {"dev", "local", "test"}:
        raise ValueError("SALON_BACKEND=mock is only allowed when ENV is dev, local or test.")
    logger.info("Using MockSalonBackend (SALON_BACKEND=mock)")
    return MockSalonBackend(timezone=get_timezone())


@lru_cache
def get_appointment_store() -> AppointmentStorePort:
    if settings.APPOINTMENT_STORE.lower() == "json":
        return JsonAppointmentStore(data_dir=settings.APPOINTMENT_DATA_DIR)
    return MemoryAppointmentStore()


@lru_cache
def get_notifier() -> LoggingNotifier:
    return LoggingNotifier()


@lru_cache
def get_availability_resolver() -> AvailabilityResolver:
    backend = get_salon_backend()
    return AvailabilityResolver(catalog=backend, availability=backend, grid=grid_from_settings(settings))


@lru_cache
def get_booking_use_case() -> BookingUseCase:
    backend = get_salon_backend()
    return BookingUseCase(catalog=backend, resolver=get_availability_resolver(), booking=backend)


@lru_cache
def get_appointment_manager() -> AppointmentManager:
    notifier = get_notifier()
    manager = AppointmentManager(
        book=AppointmentBook(),
        store=get_appointment_store(),
        resolver=get_availability_resolver(),
        notifier=notifier,
        refunds=notifier,
        timezone=get_timezone(),
    )
    loaded = manager.load()
    logging.getLogger(__name__).info("Appointment book loaded", extra={"count": loaded})
    return manager
