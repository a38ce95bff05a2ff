"""
Core module initialization.
Exports configuration, logging utilities and domain exceptions.
"""

from kitchenpos.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from kitchenpos.core.exceptions import (
    KitchenPosError,
    InvalidRequestError,
    NotFoundError,
    InvalidStateError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "KitchenPosError",
    "InvalidRequestError",
    "NotFoundError",
    "InvalidStateError",
]
