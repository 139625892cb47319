# Latest motion command sent to the STM32.
# Each axis is last-writer-wins; every update re-sends the combined pair.
import logging
from typing import Tuple

from stm_comm.errors import IoResult
from stm_comm.serial_proto import encode_command

logger = logging.getLogger(__name__)


class CommandState:
    def __init__(self, link):
        self._link = link
        self._linear = 0
        self._angular = 0

    @property
    def pair(self) -> Tuple[int, int]:
        return self._linear, self._angular

    def set_linear(self, v: int) -> IoResult:
        self._linear = v
        return self._send()

    def set_angular(self, v: int) -> IoResult:
        self._angular = v
        return self._send()

    def _send(self) -> IoResult:
        res = self._link.write(encode_command(self._linear, self._angular))
        if res.ok:
            logger.info("Sent packet: linear_vel: %d, angular_vel: %d", self._linear, self._angular)
        return res
