"""Command interface to a Vbuddy board attached over a serial line."""

from __future__ import annotations

import os
import re
import select
import sys
from pathlib import Path

from bcdlab.serialport import SerialError, SerialPort

CONFIG_FILE = "vbuddy.cfg"
BAUD_RATE = 115200
MAX_LINE = 80
MAX_REPLY = 10

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def read_port_name(path: str | os.PathLike = CONFIG_FILE) -> str:
    """Return the device name held on the first line of the configuration file."""
    with open(path, encoding="utf-8") as handle:
        line = handle.readline(MAX_LINE - 1)
    return line.rstrip("\r\n")


def parse_reply(reply: str) -> int:
    """Extract the integer from a ``$<number>*`` reply.

    A reply whose second character is not a digit carries a spurious leading
    ``$``; the number then follows the second ``$``.
    """
    text = reply
    start = text.find("$")
    if start < 0:
        raise ValueError(f"reply has no '$': {reply!r}")
    if len(reply) > 1 and ord(reply[1]) < ord("0"):
        text = text[:start] + text[start + 1 :]
        start = text.find("$")
        if start < 0:
            raise ValueError(f"reply has no second '$': {reply!r}")
    text = text[:start] + text[start + 1 :]
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"reply holds no number: {reply!r}")
    return int(match.group(1))


class _Keyboard:
    prepared = False


def get_key() -> str | None:
    """Return a pending key from standard input without blocking, or ``None``.

    On first use the terminal is switched out of line-buffered mode.
    """
    fd = sys.stdin.fileno()
    if not _Keyboard.prepared:
        try:
            import termios

            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~termios.ICANON
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        except (ImportError, OSError, Exception):
            pass
        _Keyboard.prepared = True
    ready, _, _ = select.select([fd], [], [], 0)
    if not ready:
        return None
    data = os.read(fd, 1)
    return data.decode("latin-1") or None


class Vbuddy:
    """A Vbuddy board: seven-segment digits, TFT screen, flag, encoder and audio."""

    def __init__(self, port: SerialPort | None = None) -> None:
        self.port = port if port is not None else SerialPort()

    def _ack(self) -> None:
        while True:
            try:
                reply = self.port.read_string("\n", MAX_LINE, 0)
            except SerialError as exc:
                if exc.code != -3:
                    raise
                reply = exc.data.decode("latin-1")
            if reply and reply.startswith("$"):
                return

    def _command(self, text: str) -> None:
        self.port.write_string(text)
        self._ack()

    def _reply(self) -> str:
        while True:
            try:
                reply = self.port.read_string_no_timeout("*", MAX_REPLY)
            except SerialError as exc:
                if exc.code != -3:
                    raise
                continue
            if reply:
                return reply

    def _query_number(self, text: str) -> int:
        self.port.write_string(text)
        self.port.flush_receiver()
        return parse_reply(self._reply())

    def open(self, config_path: str | os.PathLike = CONFIG_FILE) -> None:
        """Open the device named in the configuration file and clear the screen."""
        name = read_port_name(Path(config_path))
        try:
            self.port.open(name, BAUD_RATE)
        except SerialError:
            print(f"\n** Error opening port: {name}")
            raise
        print(f"\n ** Connected to Vbuddy via: {name}")
        self.port.flush_receiver()
        self.clear()

    def close(self) -> None:
        """Show STOP on the screen and close the device."""
        self._command("$t,    STOP,R\n")
        self.port.close()

    def clear(self) -> None:
        """Clear the TFT screen to black."""
        self._command("$C\n")

    def hex(self, digit: int, value: int) -> None:
        """Show a 4-bit value on seven-segment digit 0..5 (1 is right-most)."""
        if digit not in range(6):
            raise ValueError(f"digit must be between 0 and 5, not {digit}")
        self._command(f"$H{digit},{value}\n")

    def plot(self, y: int, low: int, high: int) -> None:
        """Plot ``y`` scaled between ``low`` and ``high`` at the next x position."""
        self._command(f"$p,{y},{low},{high}\n")

    def header(self, text: str) -> None:
        """Write a centred header at the top of the screen."""
        self._command(f"$T,{text}\n")

    def cycle(self, count: int) -> None:
        """Report the cycle count at the bottom right of the screen."""
        self._command(f"$t,cyc:{count:4d},R\n")

    def flag(self) -> bool:
        """Return the current flag value."""
        self.port.write_string("$Y\n")
        reply = self._reply()
        return len(reply) > 1 and reply[1] == "1"

    def set_mode(self, mode: int) -> None:
        """Set the flag mode: 0 toggles, 1 is one-shot."""
        self._command(f"$y,{mode:1d}\n")

    def value(self) -> int:
        """Return the parameter value set by the rotary encoder."""
        return self._query_number("$V\n")

    def init_analog_out(self, nsamp: int) -> None:
        """Prepare the DAC output buffer for ``nsamp`` samples."""
        self._command(f"$S,{nsamp}\n")

    def output_sample(self, sample: int) -> None:
        """Append a sample to the DAC buffer."""
        self._command(f"$s,{sample}\n")

    def aout_on(self) -> None:
        """Turn analog output on."""
        self._command("$O\n")

    def aout_off(self) -> None:
        """Turn analog output off."""
        self._command("$o\n")

    def init_mic_in(self, nsamp: int) -> None:
        """Prepare the microphone buffer to capture ``nsamp`` samples."""
        self._command(f"$M,{nsamp}\n")

    def mic_value(self) -> int:
        """Return the next sample from the microphone buffer."""
        return self._query_number("$m\n")