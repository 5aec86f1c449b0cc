"""
Application startup validation and initialization.

Checks run before the API starts serving reservation traffic so a
misconfigured deployment fails loudly instead of refusing bookings later.
"""

import logging
import sys
from typing import List, Tuple

import sqlalchemy as sa
from sqlalchemy import text

from core.config import get_settings, DEFAULT_JWT_SECRET
from core.database import engine

logger = logging.getLogger(__name__)

REQUIRED_TABLES = [
    "dining_tables",
    "opening_hours",
    "holidays",
    "reservations",
    "reservation_slot_claims",
    "reservation_audit_logs",
]


def configure_startup_logging(level: str = "INFO"):
    """Configure logging for the process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


class StartupValidator:
    """Validates application startup requirements"""

    def __init__(self, bind=None):
        self.bind = bind or engine
        self.settings = get_settings()
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def check_database_connection(self) -> bool:
        """Check database connectivity"""
        try:
            with self.bind.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection successful")
            return True
        except sa.exc.SQLAlchemyError as e:
            self.errors.append(f"Database connection failed: {str(e)}")
            return False

    def check_environment_config(self) -> bool:
        """Warn about development defaults"""
        if self.settings.jwt_secret_key == DEFAULT_JWT_SECRET:
            self.warnings.append("Using development JWT_SECRET_KEY - change for production")
        if self.settings.reservation_deposit_party_size is None:
            self.warnings.append("Deposits are disabled (RESERVATION_DEPOSIT_PARTY_SIZE unset)")
        return True

    def check_required_tables(self) -> bool:
        """Check that the reservation schema has been migrated"""
        try:
            existing_tables = sa.inspect(self.bind).get_table_names()
        except sa.exc.SQLAlchemyError as e:
            self.warnings.append(f"Could not check database tables: {str(e)}")
            return True

        missing_tables = [t for t in REQUIRED_TABLES if t not in existing_tables]
        if missing_tables:
            self.warnings.append(
                f"Missing database tables: {', '.join(missing_tables)}. "
                "Run migrations with: alembic upgrade head"
            )
        return True

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """Run all validation checks"""
        checks = [
            ("Environment Configuration", self.check_environment_config),
            ("Database Connection", self.check_database_connection),
            ("Database Tables", self.check_required_tables),
        ]

        all_passed = True
        for check_name, check_func in checks:
            logger.info(f"Running check: {check_name}")
            if not check_func():
                all_passed = False

        return all_passed, self.errors, self.warnings


def run_startup_checks(bind=None):
    """Run all startup validation checks"""
    settings = get_settings()
    logger.info(f"Starting reservations API ({settings.environment})")

    validator = StartupValidator(bind)
    passed, errors, warnings = validator.validate_all()

    for warning in warnings:
        logger.warning(f"Startup warning: {warning}")
    for error in errors:
        logger.error(f"Startup error: {error}")

    if not passed and settings.is_production:
        logger.error("Cannot start in production with errors!")
        sys.exit(1)
    elif not passed:
        logger.warning("Starting in development mode despite errors")
    else:
        logger.info("All startup checks passed")

    return passed, warnings
