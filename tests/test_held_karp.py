import numpy as np
import pandas as pd
import pytest

from tsp_bitmask.brute_force import TSPBruteForce
from tsp_bitmask.held_karp import INF, TSPHeldKarp, as_matrix, is_feasible, tour_cost

FOUR = [
    [0, 10, 15, 20],
    [10, 0, 35, 25],
    [15, 35, 0, 30],
    [20, 25, 30, 0],
]


class Recorder:
    def __init__(self):
        self.events = []

    def update(self, percent):
        self.events.append(("update", percent))

    def set_message(self, text):
        self.events.append(("message", text))

    def finish(self, text):
        self.events.append(("finish", text))


def random_matrix(rng, n, symmetric=True):
    m = rng.integers(1, 100, size=(n, n))
    if symmetric:
        m = np.triu(m, 1)
        m = m + m.T
    np.fill_diagonal(m, 0)
    return m


def assert_is_tour(path, n):
    assert path[0] == 0 and path[-1] == 0
    assert sorted(path[:-1]) == list(range(n))


def test_four_city_example():
    solver = TSPHeldKarp(FOUR)
    cost, path = solver.solve()
    assert cost == 80
    assert path == [0, 1, 3, 2, 0]
    assert tour_cost(FOUR, path) == 80
    assert solver.get_cost() == 80
    assert solver.get_path() == path


@pytest.mark.parametrize("dist", [[[0]], np.zeros((1, 1), dtype=int), [[7]]])
def test_single_city(dist):
    assert TSPHeldKarp(dist).solve() == (0, [0])


def test_two_cities_directed():
    cost, path = TSPHeldKarp([[0, 3], [8, 0]]).solve()
    assert cost == 11
    assert path == [0, 1, 0]


@pytest.mark.parametrize("n", [2, 3, 4, 5, 6])
@pytest.mark.parametrize("symmetric", [True, False])
def test_matches_brute_force(n, symmetric):
    rng = np.random.default_rng(1000 + n)
    for _ in range(5):
        dist = random_matrix(rng, n, symmetric)
        cost, path = TSPHeldKarp(dist).solve()
        _, best = TSPBruteForce(dist).run()
        assert cost == best
        assert_is_tour(path, n)
        assert tour_cost(dist.tolist(), path) == cost


def test_symmetric_reverse_same_cost():
    rng = np.random.default_rng(7)
    dist = random_matrix(rng, 7).tolist()
    cost, path = TSPHeldKarp(dist).solve()
    assert tour_cost(dist, path) == tour_cost(dist, path[::-1]) == cost


def test_memo_bounded_and_consistent():
    rng = np.random.default_rng(3)
    dist = random_matrix(rng, 8, symmetric=False)
    solver = TSPHeldKarp(dist)
    solver.solve()
    assert 0 < len(solver.memo) <= solver.total_states
    assert solver.total_states == 8 * 2 ** 8

    fresh = TSPHeldKarp(dist)
    for (mask, pos), cost in list(solver.memo.items())[:50]:
        assert fresh.tsp_dp(mask, pos) == cost


def test_memo_is_read_only():
    solver = TSPHeldKarp(FOUR)
    solver.solve()
    with pytest.raises(TypeError):
        solver.memo[(1, 0)] = 0


def test_memo_write_once():
    solver = TSPHeldKarp(FOUR)
    solver.solve()
    key, value = next(iter(solver.memo.items()))
    solver._store(*key, value)
    with pytest.raises(RuntimeError):
        solver._store(*key, value + 1)


def test_isolated_city_is_infeasible():
    dist = [row[:] for row in FOUR]
    for j in range(4):
        if j != 2:
            dist[2][j] = INF
            dist[j][2] = INF
    cost, path = TSPHeldKarp(dist).solve()
    assert cost >= INF
    assert not is_feasible(cost)
    assert_is_tour(path, 4)


def test_one_way_edges_infeasible():
    # nobody can return to 0
    dist = [[0, 1, 1], [INF, 0, 1], [INF, 1, 0]]
    cost, path = TSPHeldKarp(dist).solve()
    assert cost == INF
    assert path == [0, 1, 2, 0]


def test_sparse_graph_finds_only_cycle():
    dist = [[0, 5, INF, INF],
            [INF, 0, 5, INF],
            [INF, INF, 0, 5],
            [5, INF, INF, 0]]
    assert TSPHeldKarp(dist).solve() == (20, [0, 1, 2, 3, 0])


def test_tie_break_lowest_index():
    dist = [[0 if i == j else 1 for j in range(4)] for i in range(4)]
    results = {tuple(TSPHeldKarp(dist).solve()[1]) for _ in range(5)}
    assert results == {(0, 1, 2, 3, 0)}


def test_tie_break_square():
    # 0-1-2-3 on a unit square, diagonals 2: 0-1-2-3-0 and 0-3-2-1-0 tie
    dist = [[0, 1, 2, 1],
            [1, 0, 1, 2],
            [2, 1, 0, 1],
            [1, 2, 1, 0]]
    assert TSPHeldKarp(dist).solve() == (4, [0, 1, 2, 3, 0])


def test_reconstruct_without_forward_pass():
    solver = TSPHeldKarp(FOUR)
    assert solver.reconstruct_path() == [0, 1, 3, 2, 0]


def test_accepts_dataframe():
    df = pd.DataFrame(FOUR, index=list("ABCD"), columns=list("ABCD"))
    assert TSPHeldKarp(df).solve()[0] == 80


def test_progress_events():
    rng = np.random.default_rng(5)
    rec = Recorder()
    TSPHeldKarp(random_matrix(rng, 8), progress=rec).solve()

    updates = [p for kind, p in rec.events if kind == "update"]
    assert updates
    assert updates == sorted(updates)
    assert max(updates) <= 95
    assert rec.events[-2] == ("message", "Reconstructing optimal path...")
    assert rec.events[-1] == ("finish", "TSP solved successfully!")


def test_counters():
    # n = 5 is the smallest size where two paths lead into the same state
    solver = TSPHeldKarp(random_matrix(np.random.default_rng(9), 5))
    solver.solve()
    assert solver.computed_states > len(solver.memo)
    assert solver.memo_hits > 0


def test_verbose(capsys):
    TSPHeldKarp(FOUR, verbose=True).solve()
    out = capsys.readouterr().out
    assert "Total Cost: 80" in out
    TSPHeldKarp(FOUR).solve()
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize("dist, match", [
    ([], "empty"),
    (np.zeros((0, 0), dtype=int), "empty"),
    ([[0, 1, 2], [1, 0, 2]], "Row 0"),
    (np.zeros((2, 3), dtype=int), "square"),
    (np.zeros(3, dtype=int), "square"),
    ([[0, 1], [1, 0, 3]], "Row 1"),
    ([[0, 1.5], [1.5, 0]], "integers"),
    ([[0, -1], [1, 0]], "Negative"),
    ([[0, INF + 1], [1, 0]], "exceeds INF"),
    ([[0, INF // 2 + 1], [1, 0]], "could reach INF"),
])
def test_rejects_bad_matrix(dist, match):
    with pytest.raises(ValueError, match=match):
        TSPHeldKarp(dist)


def test_inf_entries_allowed():
    assert as_matrix([[0, INF], [INF, 0]]) == [[0, INF], [INF, 0]]


def test_second_solve_keeps_counters():
    solver = TSPHeldKarp(FOUR)
    first = solver.solve()
    computed, hits, memo_size = solver.computed_states, solver.memo_hits, len(solver.memo)
    assert solver.solve() == first
    assert solver.computed_states == computed
    assert solver.memo_hits == hits
    assert len(solver.memo) == memo_size
