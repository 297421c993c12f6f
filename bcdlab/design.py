"""Cycle model of the counter-plus-BCD-decoder design."""

from __future__ import annotations

WIDTH = 8
"""Width of the counter and of the decoder input, in bits."""

_RESULT_MASK = 0xFFFFF
_COUNT_MASK = (1 << WIDTH) - 1


def _add3_if_needed(result: int, shift: int) -> int:
    nibble = (result >> shift) & 0xF
    if nibble >= 5:
        result = (result & ~(0xF << shift) & _RESULT_MASK) | (
            ((nibble + 3) << shift) & (0xF << shift)
        )
    return result


def _shift_add(value: int) -> int:
    """Run the shift-and-add-3 loop and return the full 20-bit scratch register."""
    result = value & _COUNT_MASK
    for _ in range(WIDTH):
        result = _add3_if_needed(result, 8)
        result = _add3_if_needed(result, 12)
        result = (result << 1) & _RESULT_MASK
    return result


def double_dabble(value: int) -> int:
    """Convert an 8-bit value to three packed BCD digits (12 bits)."""
    return (_shift_add(value) >> 8) & 0xFFF


class TopRoot:
    """State of the design: inputs, the counter register and the decoder output.

    ``count`` is clocked on the rising edge of ``clk`` and cleared on the
    rising edge of ``rst``; ``bcd`` always follows ``count`` through the
    decoder.
    """

    def __init__(self, name: str = "TOP") -> None:
        self.name = name
        self.clk = 0
        self.rst = 0
        self.en = 0
        self.v = 0
        self.bcd = 0
        self.count = 0
        self.decoder_result = 0
        self._clk_last = 0
        self._rst_last = 0

    def _decode(self) -> None:
        self.decoder_result = _shift_add(self.count)
        self.bcd = (self.decoder_result >> 8) & 0xFFF

    def initial(self) -> None:
        """Record the current clock and reset levels as the previous ones."""
        self._clk_last = self.clk & 1
        self._rst_last = self.rst & 1

    def settle(self) -> None:
        """Bring the decoder output in line with the counter."""
        self._decode()

    def eval(self) -> None:
        """Evaluate one step, updating the counter on a rising clock or reset."""
        clk = self.clk & 1
        rst = self.rst & 1
        rising = (clk and not self._clk_last) or (rst and not self._rst_last)
        if rising:
            if rst:
                self.count = 0
            else:
                self.count = (self.count + (self.en & 1)) & _COUNT_MASK
            self._decode()
        self._clk_last = clk
        self._rst_last = rst