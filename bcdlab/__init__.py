"""Counter and BCD decoder simulation with a Vbuddy serial front end and VCD tracing."""

__version__ = "0.1.0"
__all__ = ["design", "model", "serialport", "testbench", "trace", "vbuddy"]