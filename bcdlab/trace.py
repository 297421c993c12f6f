"""Value change dump (VCD) output for the top-level model."""

from __future__ import annotations

import os
from typing import Callable, TextIO

from bcdlab.model import TopModel

_CONSTANT_WIDTH = 8

# code -> (width, how to read the value from the model)
_SIGNALS: dict[int, tuple[int, Callable[[TopModel], int]]] = {
    1: (1, lambda m: m.clk),
    2: (1, lambda m: m.rst),
    3: (1, lambda m: m.en),
    4: (8, lambda m: m.v),
    5: (12, lambda m: m.bcd),
    6: (8, lambda m: m.root.count),
    7: (20, lambda m: m.root.decoder_result),
    8: (32, lambda m: _CONSTANT_WIDTH),
    9: (32, lambda m: _CONSTANT_WIDTH),
}

# Codes whose values may change between dumps.
_CHANGING = (1, 2, 3, 4, 5, 6, 7)

# Scope tree: ("var", code, name) or ("scope", name, children).
_HIERARCHY = (
    ("var", 1, "clk"),
    ("var", 2, "rst"),
    ("var", 3, "en"),
    ("var", 4, "v"),
    ("var", 5, "bcd"),
    (
        "scope",
        "top",
        (
            ("var", 8, "WIDTH"),
            ("var", 1, "clk"),
            ("var", 2, "rst"),
            ("var", 3, "en"),
            ("var", 4, "v"),
            ("var", 5, "bcd"),
            ("var", 6, "count"),
            (
                "scope",
                "myCounter",
                (
                    ("var", 8, "WIDTH"),
                    ("var", 1, "clk"),
                    ("var", 2, "rst"),
                    ("var", 3, "en"),
                    ("var", 6, "count"),
                ),
            ),
            (
                "scope",
                "myDecoder",
                (
                    ("var", 6, "x"),
                    ("var", 5, "BCD"),
                    ("var", 7, "result"),
                    ("var", 9, "i"),
                ),
            ),
        ),
    ),
)

_UNITS = ((0, "s"), (-3, "ms"), (-6, "us"), (-9, "ns"), (-12, "ps"), (-15, "fs"))


def _timescale(exponent: int) -> str:
    for base, suffix in _UNITS:
        if exponent >= base:
            return f"{10 ** (exponent - base)}{suffix}"
    return f"1{_UNITS[-1][1]}"


def _identifier(code: int) -> str:
    chars = []
    n = code
    while True:
        chars.append(chr(33 + n % 94))
        n //= 94
        if not n:
            break
    return "".join(chars)


def _format(code: int, value: int) -> str:
    width = _SIGNALS[code][0]
    ident = _identifier(code)
    if width == 1:
        return f"{value & 1}{ident}"
    return f"b{value & ((1 << width) - 1):0{width}b} {ident}"


class VcdWriter:
    """Writes the model's signals to a VCD file, one sample per :meth:`dump`."""

    def __init__(self, model: TopModel) -> None:
        self.model = model
        self._file: TextIO | None = None
        self._last: dict[int, int] | None = None

    def _write_scope(self, entries: tuple, depth: int) -> None:
        indent = " " * depth
        for entry in entries:
            if entry[0] == "var":
                _, code, name = entry
                width = _SIGNALS[code][0]
                suffix = "" if width == 1 else f" [{width - 1}:0]"
                self._file.write(
                    f"{indent}$var wire {width} {_identifier(code)} {name}{suffix} $end\n"
                )
            else:
                _, name, children = entry
                self._file.write(f"{indent}$scope module {name} $end\n")
                self._write_scope(children, depth + 1)
                self._file.write(f"{indent}$upscope $end\n")

    def open(self, path: str | os.PathLike) -> None:
        """Create ``path`` and write the signal declarations."""
        self.close()
        self._file = open(path, "w", encoding="ascii", newline="\n")
        self._last = None
        self._file.write("$version bcdlab $end\n")
        self._file.write(f"$timescale {_timescale(self.model.TIME_UNIT)} $end\n")
        self._write_scope((("scope", self.model.name, _HIERARCHY),), 0)
        self._file.write("$enddefinitions $end\n")

    def dump(self, time: int) -> None:
        """Record the signals at ``time``: every value first, then only changes."""
        if self._file is None:
            raise RuntimeError("trace file is not open")
        self._file.write(f"#{time}\n")
        current = {code: reader(self.model) for code, (_, reader) in _SIGNALS.items()}
        if self._last is None:
            for code, value in current.items():
                self._file.write(_format(code, value) + "\n")
            self._last = current
        elif self.model.activity:
            for code in _CHANGING:
                if current[code] != self._last[code]:
                    self._file.write(_format(code, current[code]) + "\n")
                    self._last[code] = current[code]
        self.model.activity = False

    def close(self) -> None:
        """Finish and close the trace file, if one is open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> VcdWriter:
        return self

    def __exit__(self, *args) -> None:
        self.close()