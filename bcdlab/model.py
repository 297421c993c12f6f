"""Top-level model of the design: its ports and the evaluation loop."""

from __future__ import annotations

from bcdlab.design import TopRoot


def _port(attribute: str, doc: str) -> property:
    def fget(self: TopModel) -> int:
        return getattr(self.root, attribute)

    def fset(self: TopModel, value: int) -> None:
        setattr(self.root, attribute, int(value))

    return property(fget, fset, doc=doc)


class TopModel:
    """The design as seen by a testbench.

    Inputs ``clk``, ``rst``, ``en`` and ``v`` are written before calling
    :meth:`eval`; the output ``bcd`` is read afterwards.
    """

    MODEL_NAME = "Vtop"
    TIME_UNIT = -12
    TIME_PRECISION = -12
    THREADS = 1

    clk = _port("clk", "Clock input (1 bit).")
    rst = _port("rst", "Reset input (1 bit).")
    en = _port("en", "Count-enable input (1 bit).")
    v = _port("v", "Value input (8 bits).")
    bcd = _port("bcd", "Three BCD digits of the counter (12 bits).")

    def __init__(self, name: str = "TOP") -> None:
        self.root = TopRoot(name)
        self.activity = False
        self.finalized = False
        self._did_init = False

    @property
    def name(self) -> str:
        """Name of this model instance."""
        return self.root.name

    def _initial_loop(self) -> None:
        self._did_init = True
        self.root.initial()
        self.activity = True
        self.root.settle()
        self.root.eval()

    def eval(self) -> None:
        """Evaluate the design; call whenever the inputs change."""
        if not self._did_init:
            self._initial_loop()
        self.activity = True
        self.root.eval()

    def final(self) -> None:
        """Mark the simulation complete; the design has no final blocks to run."""
        self.finalized = True