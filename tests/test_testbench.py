import pytest

from bcdlab.model import TopModel
from bcdlab.testbench import PROG_NAME, main, run
from bcdlab.trace import VcdWriter


class FakeBuddy:
    def __init__(self, flags=(), value=7):
        self._flags = iter(flags)
        self._value = value
        self.headers = []
        self.modes = []
        self.hex_calls = []
        self.cycles = []
        self.flag_calls = 0
        self.closed = False

    def header(self, text):
        self.headers.append(text)

    def set_mode(self, mode):
        self.modes.append(mode)

    def value(self):
        return self._value

    def flag(self):
        self.flag_calls += 1
        return next(self._flags, True)

    def hex(self, digit, value):
        self.hex_calls.append((digit, value))

    def cycle(self, count):
        self.cycles.append(count)

    def close(self):
        self.closed = True


@pytest.fixture
def bench(tmp_path):
    top = TopModel()
    tracer = VcdWriter(top)
    tracer.open(tmp_path / "top.vcd")
    return top, tracer, tmp_path / "top.vcd"


def test_setup_of_board_and_inputs(bench):
    top, tracer, _ = bench
    buddy = FakeBuddy(value=7)
    run(top, buddy, tracer, 1)
    assert buddy.headers == [PROG_NAME]
    assert buddy.modes == [1]
    assert top.v == 7
    assert top.en == 1
    assert top.rst == 0


def test_shows_count_in_decimal_each_cycle(bench):
    top, tracer, _ = bench
    buddy = FakeBuddy()
    run(top, buddy, tracer, 12)
    assert buddy.cycles == list(range(1, 13))
    groups = [buddy.hex_calls[k : k + 4] for k in range(0, len(buddy.hex_calls), 4)]
    assert len(groups) == 12
    for n, group in enumerate(groups, start=1):
        assert [digit for digit, _ in group] == [4, 3, 2, 1]
        assert group[0][1] == 0
        assert "".join(str(value) for _, value in group[1:]) == f"{n:03d}"


def test_waits_for_flag_before_each_step(bench):
    top, tracer, _ = bench
    buddy = FakeBuddy(flags=[False, False, True])
    run(top, buddy, tracer, 1)
    assert buddy.flag_calls == 3
    assert buddy.cycles == [1]


def test_closes_board_and_trace(bench):
    top, tracer, _ = bench
    buddy = FakeBuddy()
    run(top, buddy, tracer, 2)
    assert buddy.closed is True
    with pytest.raises(RuntimeError):
        tracer.dump(10)


def test_trace_has_two_samples_per_cycle(bench):
    top, tracer, path = bench
    run(top, FakeBuddy(), tracer, 4)
    times = [int(line[1:]) for line in path.read_text().splitlines() if line.startswith("#")]
    assert times == list(range(8))


def test_main_fails_without_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = main(["--config", str(tmp_path / "missing.cfg"), "--vcd", str(tmp_path / "t.vcd")])
    assert result == -1
    assert (tmp_path / "t.vcd").read_text().startswith("$version")