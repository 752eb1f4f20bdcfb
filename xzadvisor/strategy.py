"""Compression strategies shared by the predictor, optimizer and scorer."""

from enum import Enum


class Strategy(Enum):
    """What the caller wants to optimize for."""

    AUTO = "auto"
    SPEED = "speed"
    RATIO = "ratio"
    BALANCED = "balanced"
    MEMORY_EFFICIENT = "memory_efficient"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "Strategy":
        """Accept a Strategy or a name such as 'ratio' or 'memory-efficient'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == key:
                return member
        names = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown strategy: {value!r}. Choose from: {names}")
