"""Core module - config, database, clock, exceptions."""

from verdant.core.config import get_settings, Settings
from verdant.core.database import Database, get_db
from verdant.core.clock import Clock, FixedClock, get_clock
from verdant.core.exceptions import (
    AppException,
    NotFoundException,
    BadRequestException,
    ConflictException,
)

__all__ = [
    "get_settings",
    "Settings",
    "Database",
    "get_db",
    "Clock",
    "FixedClock",
    "get_clock",
    "AppException",
    "NotFoundException",
    "BadRequestException",
    "ConflictException",
]
