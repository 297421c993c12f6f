from bcdlab.design import double_dabble
from bcdlab.model import TopModel


def _edge(top):
    top.clk = 1
    top.eval()
    top.clk = 0
    top.eval()


def test_identity():
    top = TopModel()
    assert top.name == "TOP"
    assert TopModel("dut").name == "dut"
    assert top.MODEL_NAME == "Vtop"
    assert top.TIME_UNIT == -12


def test_counts_rising_edges_when_enabled():
    top = TopModel()
    top.en = 1
    top.clk = 0
    top.eval()
    for n in range(1, 21):
        _edge(top)
        assert top.bcd == double_dabble(n)


def test_disabled_counter_holds():
    top = TopModel()
    top.en = 0
    top.eval()
    for _ in range(5):
        _edge(top)
    assert top.bcd == double_dabble(0)
    assert top.root.count == 0


def test_reset_clears_counter():
    top = TopModel()
    top.en = 1
    top.eval()
    for _ in range(5):
        _edge(top)
    assert top.root.count == 5
    top.rst = 1
    top.eval()
    assert top.root.count == 0
    assert top.bcd == double_dabble(0)


def test_first_eval_settles_decoder():
    top = TopModel()
    top.root.count = 42
    top.eval()
    assert top.bcd == double_dabble(42)


def test_held_clock_does_not_count():
    top = TopModel()
    top.en = 1
    top.clk = 1
    top.eval()
    before = top.root.count
    for _ in range(4):
        top.eval()
    assert top.root.count == before


def test_counter_wraps_at_eight_bits():
    top = TopModel()
    top.en = 1
    top.eval()
    for _ in range(255):
        _edge(top)
    assert top.bcd == double_dabble(255)
    _edge(top)
    assert top.root.count == 0


def test_eval_marks_activity_and_final_keeps_state():
    top = TopModel()
    assert top.activity is False
    top.en = 1
    top.eval()
    _edge(top)
    assert top.activity is True
    bcd = top.bcd
    top.final()
    assert top.finalized is True
    assert top.bcd == bcd