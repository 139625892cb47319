# stm_comm/serial_proto.py
import struct
from collections import deque
from typing import Deque, NamedTuple, Optional, Tuple

from .msg_types import (
    COMMAND_FRAME_LEN,
    INT32_MAX,
    INT32_MIN,
    SENSOR_FOOTER,
    SENSOR_FRAME_LEN,
    SENSOR_HEADER,
)

_SENSOR_FIELDS = struct.Struct(">iii")  # adc right, front, left
_COMMAND = struct.Struct(">ii")         # linear, angular


class SensorReading(NamedTuple):
    adc_right: int
    adc_front: int
    adc_left: int


def decode_sensor_frame(buf: bytes) -> Optional[SensorReading]:
    """
    Decode one sensor frame: 08 | right BE32 | front BE32 | left BE32 | 20.
    Anything that is not exactly that shape gives None.
    """
    if len(buf) != SENSOR_FRAME_LEN:
        return None
    if buf[0] != SENSOR_HEADER or buf[SENSOR_FRAME_LEN - 1] != SENSOR_FOOTER:
        return None
    return SensorReading(*_SENSOR_FIELDS.unpack(bytes(buf[1:SENSOR_FRAME_LEN - 1])))


def encode_command(linear: int, angular: int) -> bytes:
    for name, v in (("linear", linear), ("angular", angular)):
        if not INT32_MIN <= v <= INT32_MAX:
            raise ValueError(f"{name} velocity {v} does not fit in int32")
    return _COMMAND.pack(linear, angular)


def decode_command_bytes(packet: bytes) -> Tuple[int, int]:
    """Inverse of encode_command; the bridge never reads these back, tests do."""
    if len(packet) != COMMAND_FRAME_LEN:
        raise ValueError(f"command packet must be {COMMAND_FRAME_LEN} bytes, got {len(packet)}")
    linear, angular = _COMMAND.unpack(bytes(packet))
    return linear, angular


class SensorFrameScanner:
    """
    Streaming variant of decode_sensor_frame. Bytes are pushed as they
    arrive; complete frames are popped in order. A candidate that starts
    with 0x08 but does not end with 0x20 is dropped one byte at a time so
    a real frame hiding behind it is still found.
    """

    def __init__(self) -> None:
        self.buf = bytearray()
        self.frames: Deque[SensorReading] = deque()

    def reset(self):
        self.buf.clear()
        self.frames.clear()

    def push(self, chunk: bytes):
        for b in chunk:
            if not self.buf:
                if b == SENSOR_HEADER:
                    self.buf.append(b)
                continue
            self.buf.append(b)
            if len(self.buf) < SENSOR_FRAME_LEN:
                continue
            reading = decode_sensor_frame(self.buf)
            if reading is not None:
                self.frames.append(reading)
                self.buf.clear()
            else:
                rest = bytes(self.buf[1:])  # false header, rescan after it
                self.buf.clear()
                self.push(rest)

    def pop_frame(self) -> Optional[SensorReading]:
        if not self.frames:
            return None
        return self.frames.popleft()
