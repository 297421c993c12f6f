"""Serial device access with explicit framing options and millisecond timeouts."""

from __future__ import annotations

import enum
import time

import serial

SUPPORTED_BAUDS = frozenset({9600, 19200, 38400, 57600, 115200})


class DataBits(enum.IntEnum):
    """Number of data bits in one UART transmission."""

    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    SIXTEEN = 16


class StopBits(enum.Enum):
    """Number of stop bits."""

    ONE = serial.STOPBITS_ONE
    ONE_POINT_FIVE = serial.STOPBITS_ONE_POINT_FIVE
    TWO = serial.STOPBITS_TWO


class Parity(enum.Enum):
    """Type of parity bit."""

    NONE = serial.PARITY_NONE
    EVEN = serial.PARITY_EVEN
    ODD = serial.PARITY_ODD
    MARK = serial.PARITY_MARK
    SPACE = serial.PARITY_SPACE


_DATABITS = {
    DataBits.FIVE: serial.FIVEBITS,
    DataBits.SIX: serial.SIXBITS,
    DataBits.SEVEN: serial.SEVENBITS,
    DataBits.EIGHT: serial.EIGHTBITS,
}
_STOPBITS = {StopBits.ONE: serial.STOPBITS_ONE, StopBits.TWO: serial.STOPBITS_TWO}
_PARITY = {
    Parity.NONE: serial.PARITY_NONE,
    Parity.EVEN: serial.PARITY_EVEN,
    Parity.ODD: serial.PARITY_ODD,
}


class SerialError(Exception):
    """A serial operation failed.

    ``code`` identifies the failure: -1 write error, -2 open or read error,
    -3 maximum length reached, -4 unsupported speed, -7 unsupported data bits,
    -8 unsupported stop bits, -9 unsupported parity.  ``data`` holds whatever
    was received before the failure.
    """

    def __init__(self, message: str, code: int, data: bytes = b"") -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class Timer:
    """Measures elapsed wall time in whole milliseconds."""

    def __init__(self) -> None:
        self._started = time.monotonic()

    def start(self) -> None:
        """Restart the timer from now."""
        self._started = time.monotonic()

    def elapsed_ms(self) -> int:
        """Milliseconds since the timer was last started."""
        return int((time.monotonic() - self._started) * 1000)


def _as_bytes(value: str | bytes | bytearray | int) -> bytes:
    if isinstance(value, int):
        return bytes([value])
    if isinstance(value, str):
        return value.encode("latin-1")
    return bytes(value)


class SerialPort:
    """A serial device that is opened, read, written and closed."""

    def __init__(self) -> None:
        self._port: serial.SerialBase | None = None

    def open(
        self,
        device: str,
        bauds: int,
        databits: DataBits = DataBits.EIGHT,
        parity: Parity = Parity.NONE,
        stopbits: StopBits = StopBits.ONE,
    ) -> None:
        """Open ``device`` (a path or a pyserial URL) with the given framing."""
        self.close()
        try:
            port = serial.serial_for_url(device, do_not_open=True)
            port.open()
        except (serial.SerialException, OSError, ValueError) as exc:
            raise SerialError(f"cannot open {device}: {exc}", -2) from exc

        try:
            if bauds not in SUPPORTED_BAUDS:
                raise SerialError(f"unsupported speed: {bauds}", -4)
            if databits not in _DATABITS:
                raise SerialError(f"unsupported data bits: {databits}", -7)
            if stopbits not in _STOPBITS:
                raise SerialError(f"unsupported stop bits: {stopbits}", -8)
            if parity not in _PARITY:
                raise SerialError(f"unsupported parity: {parity}", -9)
            try:
                port.baudrate = bauds
                port.bytesize = _DATABITS[databits]
                port.stopbits = _STOPBITS[stopbits]
                port.parity = _PARITY[parity]
                port.xonxoff = False
                port.rtscts = False
                port.timeout = 0
            except (serial.SerialException, ValueError) as exc:
                raise SerialError(f"cannot configure {device}: {exc}", -5) from exc
        except SerialError:
            port.close()
            raise
        self._port = port

    def is_open(self) -> bool:
        """Whether a device is currently open."""
        return self._port is not None and self._port.is_open

    def close(self) -> None:
        """Close the device, if one is open."""
        if self._port is not None:
            self._port.close()
            self._port = None

    def _require_port(self, code: int) -> serial.SerialBase:
        if not self.is_open():
            raise SerialError("device is not open", code)
        return self._port

    def write_bytes(self, data: bytes | bytearray) -> None:
        """Write all of ``data`` to the device."""
        port = self._require_port(-1)
        payload = bytes(data)
        try:
            written = port.write(payload)
        except (serial.SerialException, OSError) as exc:
            raise SerialError(f"write failed: {exc}", -1) from exc
        if written is not None and written != len(payload):
            raise SerialError("short write", -1)

    def write_char(self, byte: str | bytes | int) -> None:
        """Write a single character."""
        payload = _as_bytes(byte)
        if len(payload) != 1:
            raise ValueError("write_char takes exactly one character")
        self.write_bytes(payload)

    def write_string(self, text: str | bytes) -> None:
        """Write a string."""
        self.write_bytes(_as_bytes(text))

    def read_char(self, timeout_ms: int = 0) -> bytes | None:
        """Read one byte; ``None`` on timeout. A timeout of 0 waits forever."""
        port = self._require_port(-2)
        try:
            port.timeout = None if timeout_ms == 0 else timeout_ms / 1000
            data = port.read(1)
        except (serial.SerialException, OSError) as exc:
            raise SerialError(f"read failed: {exc}", -2) from exc
        return data or None

    def read_string_no_timeout(self, final_char: str, max_bytes: int) -> str:
        """Read up to and including ``final_char``, waiting as long as needed."""
        final = _as_bytes(final_char)
        received = bytearray()
        while len(received) < max_bytes:
            byte = self.read_char(0)
            if byte is None:
                continue
            received += byte
            if byte == final:
                return received.decode("latin-1")
        raise SerialError("maximum length reached", -3, bytes(received))

    def read_string(
        self, final_char: str, max_bytes: int, timeout_ms: int = 0
    ) -> str | None:
        """Read up to and including ``final_char``; ``None`` on timeout."""
        if timeout_ms == 0:
            return self.read_string_no_timeout(final_char, max_bytes)
        final = _as_bytes(final_char)
        received = bytearray()
        timer = Timer()
        while len(received) < max_bytes:
            remaining = timeout_ms - timer.elapsed_ms()
            if remaining > 0:
                byte = self.read_char(remaining)
                if byte is not None:
                    received += byte
                    if byte == final:
                        return received.decode("latin-1")
            if timer.elapsed_ms() > timeout_ms:
                return None
        raise SerialError("maximum length reached", -3, bytes(received))

    def read_bytes(
        self, max_bytes: int, timeout_ms: int = 0, sleep_us: int = 100
    ) -> bytes:
        """Read up to ``max_bytes``, returning what arrived before the timeout."""
        port = self._require_port(-2)
        received = bytearray()
        timer = Timer()
        try:
            port.timeout = 0
            while timeout_ms == 0 or timer.elapsed_ms() < timeout_ms:
                chunk = port.read(max_bytes - len(received))
                if chunk:
                    received += chunk
                    if len(received) >= max_bytes:
                        return bytes(received)
                time.sleep(sleep_us / 1_000_000)
        except (serial.SerialException, OSError) as exc:
            raise SerialError(f"read failed: {exc}", -2, bytes(received)) from exc
        return bytes(received)

    def flush_receiver(self) -> None:
        """Discard everything waiting in the receive buffer."""
        self._require_port(-2).reset_input_buffer()

    def available(self) -> int:
        """Number of bytes received but not yet read."""
        return self._require_port(-2).in_waiting

    def __enter__(self) -> SerialPort:
        return self

    def __exit__(self, *args) -> None:
        self.close()