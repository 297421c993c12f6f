import pytest

from bcdlab.model import TopModel
from bcdlab.trace import VcdWriter


def _parse(path):
    """Return ({scope.path.name: (id, width)}, [(time, {id: value})])."""
    variables = {}
    frames = []
    scopes = []
    in_body = False
    for line in path.read_text().splitlines():
        words = line.split()
        if not words:
            continue
        if not in_body:
            if words[0] == "$scope":
                scopes.append(words[2])
            elif words[0] == "$upscope":
                scopes.pop()
            elif words[0] == "$var":
                key = ".".join(scopes + [words[4]])
                variables[key] = (words[3], int(words[2]))
            elif words[0] == "$enddefinitions":
                in_body = True
            continue
        if line.startswith("#"):
            frames.append((int(line[1:]), {}))
        elif line.startswith("b"):
            bits, ident = words
            frames[-1][1][ident] = int(bits[1:], 2)
        else:
            frames[-1][1][line[1:]] = int(line[0])
    return variables, frames


def _edge(top):
    top.clk = 1
    top.eval()
    top.clk = 0
    top.eval()


def test_timescale_follows_model_time_unit(tmp_path):
    path = tmp_path / "t.vcd"
    with VcdWriter(TopModel()) as writer:
        writer.open(path)
    assert "$timescale 1ps $end" in path.read_text().splitlines()


def test_declares_hierarchy_with_widths(tmp_path):
    path = tmp_path / "t.vcd"
    with VcdWriter(TopModel()) as writer:
        writer.open(path)
    variables, _ = _parse(path)
    assert variables["TOP.v"][1] == 8
    assert variables["TOP.bcd"][1] == 12
    assert variables["TOP.top.myCounter.count"][1] == 8
    assert variables["TOP.top.myDecoder.result"][1] == 20


def test_shared_signals_share_identifiers(tmp_path):
    path = tmp_path / "t.vcd"
    with VcdWriter(TopModel()) as writer:
        writer.open(path)
    variables, _ = _parse(path)
    assert variables["TOP.clk"][0] == variables["TOP.top.myCounter.clk"][0]
    assert variables["TOP.top.count"][0] == variables["TOP.top.myDecoder.x"][0]
    assert variables["TOP.bcd"][0] == variables["TOP.top.myDecoder.BCD"][0]


def test_first_dump_holds_every_signal(tmp_path):
    path = tmp_path / "t.vcd"
    top = TopModel()
    with VcdWriter(top) as writer:
        writer.open(path)
        writer.dump(0)
    variables, frames = _parse(path)
    assert len(frames) == 1
    time, values = frames[0]
    assert time == 0
    assert set(values) == {ident for ident, _ in variables.values()}
    assert values[variables["TOP.top.WIDTH"][0]] == 8


def test_dumped_values_follow_model(tmp_path):
    path = tmp_path / "t.vcd"
    top = TopModel()
    top.en = 1
    with VcdWriter(top) as writer:
        writer.open(path)
        for t in range(5):
            writer.dump(t)
            _edge(top)
        writer.dump(5)
    variables, frames = _parse(path)
    latest = {}
    for _, values in frames:
        latest.update(values)
    assert latest[variables["TOP.bcd"][0]] == top.bcd
    assert latest[variables["TOP.top.count"][0]] == top.root.count
    assert [t for t, _ in frames] == list(range(6))


def test_no_activity_writes_no_changes(tmp_path):
    path = tmp_path / "t.vcd"
    top = TopModel()
    with VcdWriter(top) as writer:
        writer.open(path)
        writer.dump(0)
        writer.dump(1)
    _, frames = _parse(path)
    assert frames[1] == (1, {})


def test_dump_requires_open_file(tmp_path):
    writer = VcdWriter(TopModel())
    with pytest.raises(RuntimeError):
        writer.dump(0)
    writer.open(tmp_path / "t.vcd")
    writer.close()
    with pytest.raises(RuntimeError):
        writer.dump(1)