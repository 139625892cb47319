# stm_comm/errors.py
from dataclasses import dataclass
from typing import Any, Optional


class TransportOpenError(Exception):
    """Serial port could not be opened or configured."""


class TransportIoError(Exception):
    """A read or write on an open serial port failed."""


@dataclass(frozen=True)
class IoResult:
    """
    Outcome of one SerialLink operation.
    value holds the count/bytes on success; error is set on failure.
    """
    value: Any = None
    error: Optional[TransportIoError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
