#  topic channels between the bridge and the control stack

# NOTE: control stack -> bridge on rx_port: {"topic": "linear_vel", "data": 120}
# NOTE: bridge -> control stack on peer_port: {"topic": "adc_value_front", "data": 5120}
# NOTE: one JSON object per datagram, 1500 bytes is plenty

import json
import logging
import socket
from typing import Any, List, Optional, Union

from .events import AngularUpdate, LinearUpdate, RawWrite
from .msg_types import ANGULAR_VEL, INT32_MAX, INT32_MIN, LINEAR_VEL, RAW_INPUT

MTU_BYTES = 1500

logger = logging.getLogger(__name__)

Event = Union[RawWrite, LinearUpdate, AngularUpdate]


def _is_int32(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and INT32_MIN <= v <= INT32_MAX


class UdpChannels:
    """
    Control stack <-> bridge topic link over UDP.
    Inbound datagrams become dispatcher events; publish() is the sensor sink.
    """

    def __init__(self, peer_host: str = "127.0.0.1", peer_port: int = 5005,
                 bind_host: str = "0.0.0.0", rx_port: int = 5006):
        self.tx_addr = (peer_host, peer_port)

        self.tx = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.rx = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self.rx.bind((bind_host, rx_port))
        except OSError:
            self.close()
            raise
        self.rx.setblocking(False)

    @property
    def rx_addr(self):
        return self.rx.getsockname()

    def close(self):
        self.tx.close()
        self.rx.close()

    def _to_event(self, msg: Any) -> Optional[Event]:
        if not isinstance(msg, dict):
            logger.warning("Dropping non-object message: %r", msg)
            return None
        topic, data = msg.get("topic"), msg.get("data")

        if topic == RAW_INPUT:
            if not isinstance(data, str):
                logger.warning("Dropping %s message with non-string data: %r", topic, data)
                return None
            return RawWrite(data.encode("utf-8"))

        if topic in (LINEAR_VEL, ANGULAR_VEL):
            if not _is_int32(data):
                logger.warning("Dropping %s message, data is not int32: %r", topic, data)
                return None
            return LinearUpdate(data) if topic == LINEAR_VEL else AngularUpdate(data)

        logger.warning("Dropping message on unknown topic %r", topic)
        return None

    def recv_events(self, max_msgs: int = 64) -> List[Event]:
        """
        Non-blocking: everything queued on the rx socket, in arrival order.
        """
        events: List[Event] = []
        while len(events) < max_msgs:
            try:
                data, _ = self.rx.recvfrom(MTU_BYTES)
            except BlockingIOError:
                break
            try:
                msg = json.loads(data.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                logger.warning("Dropping malformed datagram (%d bytes)", len(data))
                continue
            evt = self._to_event(msg)
            if evt is not None:
                events.append(evt)
        return events

    def publish(self, topic: str, value: int) -> None:
        """
        Fire-and-forget. A failed send is logged and dropped; only the
        serial side is allowed to stop the bridge.
        """
        out = json.dumps({"topic": topic, "data": value}).encode("utf-8")
        try:
            self.tx.sendto(out, self.tx_addr)
        except OSError as e:
            logger.warning("Dropping %s=%d, send to %s:%d failed: %s", topic, value, *self.tx_addr, e)
