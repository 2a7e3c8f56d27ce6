import numpy as np

from memory.allocator import Block
from tools.visualize_fragmentation import main, render_state


def test_render_state_bins_occupancy():
    bins = render_state([Block(0, 3, False), Block(3, 5, True)], 8, 4)
    np.testing.assert_allclose(bins, [1.0, 0.5, 0.0, 0.0])


def test_render_state_wider_than_arena():
    bins = render_state([Block(0, 1, False), Block(1, 1, True)], 2, 4)
    assert bins.shape == (4,)
    assert bins[0] == 1.0 and bins[-1] == 0.0


def test_heatmap_written(tmp_path):
    out = tmp_path / "heat.png"
    main(["--ops", "60", "--seed", "4", "--width", "32", "--out", str(out)])
    assert out.exists() and out.stat().st_size > 0
