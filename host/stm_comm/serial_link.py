# stm_comm/serial_link.py
import logging

import serial

from .errors import IoResult, TransportIoError, TransportOpenError

logger = logging.getLogger(__name__)


class SerialLink:
    """
    UART to the STM32. port may be a device path or a pyserial URL
    (loop://, socket://host:port, ...).
    Every IO call returns an IoResult instead of raising.
    """

    def __init__(self, port: str = "/dev/ttyUSB0", baud: int = 115200, timeout: float = 0.01):
        self.port = port
        self.baud = baud
        try:
            self.ser = serial.serial_for_url(port, baudrate=baud, timeout=timeout)
        except (serial.SerialException, ValueError) as e:
            raise TransportOpenError(f"Unable to open port {port}: {e}") from e
        if not self.ser.is_open:
            raise TransportOpenError(f"Failed to open serial port {port}")
        logger.info("Serial port opened successfully (%s @ %d)", port, baud)

    @property
    def is_open(self) -> bool:
        return bool(self.ser and self.ser.is_open)

    def close(self):
        if self.is_open:
            self.ser.close()
            logger.info("Serial port %s closed", self.port)

    def available(self) -> IoResult:
        try:
            return IoResult(value=self.ser.in_waiting)
        except (serial.SerialException, OSError) as e:
            return IoResult(error=TransportIoError(str(e)))

    def read(self, n: int) -> IoResult:
        try:
            return IoResult(value=bytes(self.ser.read(n)))
        except (serial.SerialException, OSError) as e:
            return IoResult(error=TransportIoError(str(e)))

    def read_available(self, min_bytes: int = 1) -> IoResult:
        """
        Read everything currently buffered, but only once at least
        min_bytes are waiting; otherwise b"" and nothing is consumed.
        """
        res = self.available()
        if not res.ok:
            return res
        if res.value < max(min_bytes, 1):
            return IoResult(value=b"")
        return self.read(res.value)

    def write(self, data: bytes) -> IoResult:
        try:
            return IoResult(value=self.ser.write(data))
        except (serial.SerialException, OSError) as e:
            return IoResult(error=TransportIoError(str(e)))
