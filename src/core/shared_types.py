"""
Type definitions used across layers
"""

from enum import StrEnum


class PlayerColor(StrEnum):
    """Fixed palette a player tile can be painted with. Order is the order in which new players get assigned one."""

    PURPLE = "purple"
    BLUE = "blue"
    GREEN = "green"
    ORANGE = "orange"
    RED = "red"
    YELLOW = "yellow"
    PINK = "pink"
    TEAL = "teal"


class EffectKind(StrEnum):
    COUNTER = "counter"
    FLAG = "flag"


class DisplayTier(StrEnum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorKind(StrEnum):
    """Failure values passed back across the store boundary (nothing gets raised across it)."""

    NOT_FOUND = "not found"
    CAPACITY = "capacity"
    PASSWORD_MISMATCH = "password mismatch"
    STORE_UNAVAILABLE = "store unavailable"
    INVALID_REQUEST = "invalid request"
    ALREADY_EXISTS = "already exists"


class ZoneState(StrEnum):
    IDLE = "idle"
    PRESSED = "pressed"
    FIRED = "fired"
