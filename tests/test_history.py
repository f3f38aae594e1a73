import logging

from core.history import HistoryManager
from core.level_grid import LevelGrid


def _grid(code):
    return LevelGrid.create(2, 2, code)


def test_undo_redo_round_trip():
    h = HistoryManager()
    before, after = _grid("r"), _grid("g")
    h.record_before_mutation(before)

    restored = h.undo(after)
    assert restored == before
    assert h.can_redo()

    again = h.redo(restored)
    assert again == after
    assert h.can_undo() and not h.can_redo()


def test_snapshots_are_deep_copies():
    h = HistoryManager()
    g = _grid("r")
    h.record_before_mutation(g)
    g.get_cell(0, 0).base_code = "b"
    assert h.undo(g).get_cell(0, 0).base_code == "r"


def test_bounded_history_evicts_oldest():
    h = HistoryManager(max_history=3)
    for code in ["r", "g", "b", "y", "p"]:
        h.record_before_mutation(_grid(code))
    assert len(h.undo_stack) == 3
    assert h.undo_stack[0].get_cell(0, 0).base_code == "b"


def test_new_mutation_clears_redo():
    h = HistoryManager()
    h.record_before_mutation(_grid("r"))
    h.undo(_grid("g"))
    h.record_before_mutation(_grid("b"))
    assert not h.can_redo()


def test_empty_stacks_log_and_return_none(caplog):
    h = HistoryManager()
    with caplog.at_level(logging.INFO):
        assert h.undo(_grid("r")) is None
        assert h.redo(_grid("r")) is None
    assert "Nothing to undo!" in caplog.text
    assert "Nothing to redo!" in caplog.text


def test_reset_and_info():
    h = HistoryManager(max_history=5)
    h.record_before_mutation(_grid("r"))
    info = h.get_history_info()
    assert info["undo_count"] == 1 and info["max_history"] == 5
    h.reset()
    assert h.get_history_info()["undo_count"] == 0
