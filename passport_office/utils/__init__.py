"""
Utilities package for the Passport Office records backend.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of domain-specific logic.
"""

from passport_office.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
