"""Testbench that clocks the design and shows its BCD output on a Vbuddy."""

from __future__ import annotations

import argparse
import sys

from bcdlab.model import TopModel
from bcdlab.serialport import SerialError
from bcdlab.trace import VcdWriter
from bcdlab.vbuddy import CONFIG_FILE, Vbuddy

PROG_NAME = "Lab1: BCD"
DEFAULT_CYCLES = 50


def run(top, buddy, tracer, cycles: int = DEFAULT_CYCLES) -> None:
    """Step the design ``cycles`` times, one step per flag press, then close."""
    buddy.header(PROG_NAME)
    buddy.set_mode(1)

    top.clk = 1
    top.rst = 0
    top.en = 1
    top.v = buddy.value()

    for i in range(cycles):
        while not buddy.flag():
            pass

        for half in range(2):
            tracer.dump(2 * i + half)
            top.clk = 0 if top.clk else 1
            top.eval()

        bcd = int(top.bcd)
        buddy.hex(4, (bcd >> 16) & 0xF)
        buddy.hex(3, (bcd >> 8) & 0xF)
        buddy.hex(2, (bcd >> 4) & 0xF)
        buddy.hex(1, bcd & 0xF)
        buddy.cycle(i + 1)

    buddy.close()
    tracer.close()


def main(argv: list[str] | None = None) -> int:
    """Run the testbench against a connected Vbuddy."""
    parser = argparse.ArgumentParser(description="Step the BCD counter on a Vbuddy.")
    parser.add_argument("--config", default=CONFIG_FILE, help="file naming the port")
    parser.add_argument("--vcd", default="top.vcd", help="trace output file")
    parser.add_argument("--cycles", type=int, default=DEFAULT_CYCLES)
    args = parser.parse_args(argv)

    top = TopModel()
    tracer = VcdWriter(top)
    tracer.open(args.vcd)

    buddy = Vbuddy()
    try:
        buddy.open(args.config)
    except (OSError, SerialError) as exc:
        print(f"Cannot open Vbuddy: {exc}", file=sys.stderr)
        tracer.close()
        return -1

    run(top, buddy, tracer, args.cycles)
    return 0


if __name__ == "__main__":
    sys.exit(main())