import json

import pytest

from memory.allocator import FirstFitAllocator
from memory.workload import DEFAULT_FILL, WorkloadRunner, load_trace, random_events
import run_sim


def test_runner_alloc_fills_and_frees():
    a = FirstFitAllocator(100)
    logs = []
    r = WorkloadRunner(a, log=logs.append)
    r.run([
        {"event": "alloc", "id": "x", "size": 40},
        {"event": "alloc", "id": "y", "size": 80},
        {"event": "free", "id": "x"},
        {"event": "free", "id": "x"},
    ])
    assert a.read(0, 1) == bytes([DEFAULT_FILL])
    assert r.stats["alloc"] == 1
    assert r.stats["alloc_fail"] == 1
    assert r.stats["free"] == 1
    assert r.stats["skipped"] == 1
    assert logs[0] == "Allocated 40 bytes at address 0"
    assert logs[1].startswith("Allocation failed:")
    assert logs[2] == "Deallocated memory at address 0"
    assert r.handles == {}


def test_drop_is_reclaimed_by_gc():
    a = FirstFitAllocator(100)
    r = WorkloadRunner(a)
    r.run([
        {"event": "alloc", "id": "keep", "size": 10},
        {"event": "alloc", "id": "leak", "size": 30},
        {"event": "drop", "id": "leak"},
        {"event": "gc"},
        {"event": "check"},
    ])
    assert r.stats["reclaimed"] == 30
    assert [(b.address, b.size, b.free) for b in a.snapshot()] == [(0, 10, False), (10, 90, True)]
    assert list(r.handles) == ["keep"]


def test_zero_fill_block_is_collected_and_forgotten():
    a = FirstFitAllocator(16)
    r = WorkloadRunner(a)
    r.run([{"event": "alloc", "id": "z", "size": 16, "fill": 0}, {"event": "gc"}])
    assert r.stats["reclaimed"] == 16
    assert r.handles == {}


def test_unknown_event():
    r = WorkloadRunner(FirstFitAllocator(8))
    with pytest.raises(ValueError):
        r.apply({"event": "explode"})


def test_random_events_deterministic_and_closed_by_gc():
    evs = list(random_events(ops=40, seed=3))
    assert evs == list(random_events(ops=40, seed=3))
    assert len(evs) == 41
    assert evs[-1] == {"event": "gc"}
    assert evs[0]["event"] == "alloc"
    assert all(1 <= e["size"] <= 100 for e in evs if e["event"] == "alloc")


@pytest.mark.parametrize("seed", range(8))
def test_random_workload_keeps_invariants(seed):
    a = FirstFitAllocator(1024)
    r = WorkloadRunner(a)
    for ev in random_events(ops=300, drop_prob=0.3, seed=seed):
        r.apply(ev)
        a.check_invariants()
    assert r.stats["free_fail"] == 0
    # every surviving handle still owns a used block
    starts = {b.address: b for b in a.blocks}
    for addr, size in r.handles.values():
        assert not starts[addr].free and starts[addr].size == size
    assert a.used() == sum(size for _, size in r.handles.values())


def test_load_trace_skips_blank_lines(tmp_path):
    p = tmp_path / "t.jsonl"
    p.write_text(json.dumps({"event": "gc"}) + "\n\n" + json.dumps({"event": "check"}) + "\n")
    assert list(load_trace(str(p))) == [{"event": "gc"}, {"event": "check"}]


def test_run_sim_random(capsys):
    stats = run_sim.main(["--seed", "1", "--check", "--show-map", "--width", "64"])
    out = capsys.readouterr().out
    assert "Simulator Summary" in out
    assert "Fragmentation: LFE=" in out
    assert "Legend: # = Allocated, - = Free" in out
    assert stats["gc"] == 1


def test_run_sim_missing_trace(tmp_path):
    with pytest.raises(SystemExit):
        run_sim.main(["--trace", str(tmp_path / "missing.jsonl")])


def test_repeated_alloc_id_is_skipped():
    a = FirstFitAllocator(100)
    r = WorkloadRunner(a)
    r.run([
        {"event": "alloc", "id": "x", "size": 10},
        {"event": "alloc", "id": "x", "size": 20},
        {"event": "free", "id": "x"},
    ])
    assert r.stats["alloc"] == 1
    assert r.stats["skipped"] == 1
    assert a.used() == 0
    assert r.handles == {}


@pytest.mark.parametrize("fill", [300, -1])
def test_bad_fill_leaves_allocator_untouched(fill):
    a = FirstFitAllocator(100)
    r = WorkloadRunner(a)
    with pytest.raises(ValueError):
        r.apply({"event": "alloc", "id": "x", "size": 10, "fill": fill})
    assert a.used() == 0
    assert r.handles == {}
    assert [(b.address, b.size, b.free) for b in a.snapshot()] == [(0, 100, True)]
