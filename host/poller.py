# Periodic sensor read: SerialLink -> decode -> sink
import logging
from typing import Callable, List

from stm_comm.errors import IoResult
from stm_comm.msg_types import SENSOR_FRAME_LEN, SENSOR_TOPICS
from stm_comm.serial_proto import SensorFrameScanner, SensorReading, decode_sensor_frame

logger = logging.getLogger(__name__)

Sink = Callable[[str, int], None]


class Poller:
    """
    Called once per poll period by the dispatcher.

    strict (default): once >= 14 bytes are waiting, read all of them and
    require the whole read to be one frame. Reads of 15+ bytes are dropped.
    resync: read whatever is waiting and let SensorFrameScanner find frames.

    A read failure stops the poller for good; there is no reconnect.
    """

    def __init__(self, link, sink: Sink, resync: bool = False):
        self.link = link
        self.sink = sink
        self.resync = resync
        self.scanner = SensorFrameScanner() if resync else None
        self.armed = True

    def stop(self):
        self.armed = False

    def poll(self) -> IoResult:
        if not self.armed:
            return IoResult(value=[])

        res = self.link.read_available(min_bytes=1 if self.resync else SENSOR_FRAME_LEN)
        if not res.ok:
            self.stop()
            return res

        readings = self._decode(res.value)
        for r in readings:
            self._publish(r)
        return IoResult(value=readings)

    def _decode(self, buf: bytes) -> List[SensorReading]:
        if not buf:
            return []
        if self.scanner is not None:
            self.scanner.push(buf)
            out = []
            reading = self.scanner.pop_frame()
            while reading is not None:
                out.append(reading)
                reading = self.scanner.pop_frame()
            return out

        reading = decode_sensor_frame(buf)
        if reading is None:
            logger.debug("Frame mismatch, dropping %d bytes: %s", len(buf), buf[:SENSOR_FRAME_LEN].hex(" "))
            return []
        return [reading]

    def _publish(self, reading: SensorReading):
        for topic, value in zip(SENSOR_TOPICS, reading):
            self.sink(topic, value)
