# bcdlab

A small simulation bench for an 8-bit counter whose value goes through a
binary-to-BCD ("double dabble") decoder. The bench steps the design one clock
at a time, shows the decoded digits on a Vbuddy board connected over a serial
port, and records every signal to a VCD waveform file.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Configuration

The board's serial port is read from the first line of a configuration file,
`vbuddy.cfg` in the current directory by default:

```
/dev/ttyUSB0
```

The name is handed to pyserial's `serial_for_url`, so a pyserial URL such as
`loop://` is accepted as well. The link runs at 115200 baud, 8 data bits, no
parity, one stop bit.

## Running the bench

```
bcdlab [--config vbuddy.cfg] [--vcd top.vcd] [--cycles 50]
```

The command opens the VCD file, opens the board (clearing its screen), writes
the header `Lab1: BCD`, puts the flag into one-shot mode and reads the rotary
encoder value into the `v` input. It then runs the given number of cycles
(50 by default). Before each cycle it waits until the board's flag is set; it
then dumps the signals and toggles the clock twice, shows the BCD digits on
seven-segment displays 4 to 1, and reports the cycle number on the screen.
At the end the board shows `STOP` and is closed, and the trace file is
closed. If the configuration file or the port cannot be opened, the command
prints the reason and exits with a non-zero status.

## Using the pieces from Python

The decoder on its own (`bcdlab.design`):

```python
from bcdlab.design import double_dabble

double_dabble(42)    # 0x042
double_dabble(255)   # 0x255
```

`bcdlab.design.TopRoot` holds the design state. The counter advances by `en`
on a rising edge of `clk` and is cleared on a rising edge of `rst`; `bcd`
follows the counter through the decoder.

The clocked model (`bcdlab.model.TopModel`, with ports `clk`, `rst`, `en`,
`v` and `bcd`) and a waveform trace (`bcdlab.trace.VcdWriter`):

```python
from bcdlab.model import TopModel
from bcdlab.trace import VcdWriter

top = TopModel("TOP")
top.clk, top.rst, top.en = 1, 0, 1

with VcdWriter(top) as vcd:
    vcd.open("top.vcd")
    for step in range(10):
        vcd.dump(step)
        top.clk = not top.clk
        top.eval()

print(hex(top.bcd))
top.final()
```

The first `dump` writes every signal; later ones write only the values that
changed since the model was last evaluated.

Talking to the board directly (`bcdlab.vbuddy.Vbuddy`):

```python
from bcdlab.serialport import SerialPort
from bcdlab.vbuddy import Vbuddy

buddy = Vbuddy(SerialPort())
buddy.open("vbuddy.cfg")
buddy.header("Counter")
buddy.hex(1, 7)
print(buddy.value())
buddy.close()
```

`Vbuddy` also offers `clear`, `plot`, `cycle`, `flag`, `set_mode`,
`init_analog_out`, `output_sample`, `aout_on`, `aout_off`, `init_mic_in` and
`mic_value`. The module has `read_port_name`, `parse_reply` and `get_key`
(a non-blocking read of one key from the terminal).

`bcdlab.serialport.SerialPort` is the serial layer underneath: `open`,
`close`, `is_open`, `write_char`, `write_string`, `write_bytes`,
`read_char`, `read_string`, `read_string_no_timeout`, `read_bytes`,
`flush_receiver` and `available`. Failures raise `SerialError`, whose `code`
tells what went wrong and whose `data` holds anything received before it.

`bcdlab.testbench.run(top, buddy, tracer, cycles)` runs the same loop as the
command with objects you supply, which makes it easy to drive from your own
scripts or tests.

## What it does not do

The design is fixed: the package models this one counter and decoder and
does not read or compile hardware descriptions. It writes VCD files but does
not display waveforms. The bench needs a board (or a pyserial URL standing
in for one) to run; there is no mode that runs without it.