import types

import numpy as np
import pandas as pd

INF = 2 ** 30 - 1  # "no edge"; any n finite edges must sum below this

PROGRESS_EVERY = 100
PROGRESS_CAP = 95  # leave room for path reconstruction


def is_feasible(cost):
    return cost < INF


def tour_cost(dist, path):
    """Sum of edge costs along ``path`` (no clamping at INF)."""
    return sum(dist[path[i]][path[i + 1]] for i in range(len(path) - 1))


def as_matrix(dist):
    """Validate a distance matrix and return it as a list of int rows."""
    if isinstance(dist, pd.DataFrame):
        dist = dist.to_numpy()
    if isinstance(dist, (list, tuple)):
        if len(dist) == 0:
            raise ValueError("Distance matrix is empty")
        n = len(dist)
        for i, row in enumerate(dist):
            if isinstance(row, (list, tuple)) and len(row) != n:
                raise ValueError(f"Row {i} has {len(row)} values, expected {n}")

    arr = np.asarray(dist)
    if arr.size == 0:
        raise ValueError("Distance matrix is empty")
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise ValueError(f"Distance matrix must be square, got shape {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"Distance matrix must hold integers, got {arr.dtype}")

    n = arr.shape[0]
    if (arr < 0).any():
        i, j = np.argwhere(arr < 0)[0]
        raise ValueError(f"Negative cost {arr[i, j]} at ({i}, {j})")
    if (arr > INF).any():
        i, j = np.argwhere(arr > INF)[0]
        raise ValueError(f"Cost {arr[i, j]} at ({i}, {j}) exceeds INF ({INF})")

    finite = arr[arr < INF]
    if finite.size and int(finite.max()) * n >= INF:
        raise ValueError(
            f"Costs up to {int(finite.max())} over {n} cities could reach INF ({INF})")

    return [[int(x) for x in row] for row in arr.tolist()]


class TSPHeldKarp:
    """
    Exact TSP by Held-Karp over (visited mask, current city) states.

    The tour is anchored at city 0. ``solve`` returns ``(cost, path)`` with
    ``path`` starting and ending at 0; ``cost >= INF`` means no finite
    Hamiltonian cycle exists.

    ``progress`` is any object with ``update(percent)``, ``set_message(text)``
    and ``finish(text)`` methods (see ``tsp_bitmask.progress``).
    """
    def __init__(self, dist, progress=None, verbose=False):
        self.dist = as_matrix(dist)
        self.n = len(self.dist)
        self.full_mask = (1 << self.n) - 1
        self.progress = progress
        self.verbose = verbose

        self.dp = {}  # (mask, pos) -> cost
        self.total_states = self.n * (1 << self.n)
        self.computed_states = 0
        self.memo_hits = 0

        self.tour = []
        self.min_cost = INF

    def log(self, msg):
        if self.verbose:
            print(msg)

    @property
    def memo(self):
        return types.MappingProxyType(self.dp)

    def solve(self):
        # counters and memo cover a single solve
        if self.tour:
            return self.min_cost, self.tour

        if self.n <= 1:
            self.tour, self.min_cost = [0], 0
            if self.progress is not None:
                self.progress.finish("TSP solved successfully!")
            return self.min_cost, self.tour

        self.log(f"Solving TSP for {self.n} cities using Dynamic Programming...")
        min_cost = self.tsp_dp(1, 0)

        if self.progress is not None:
            self.progress.set_message("Reconstructing optimal path...")

        path = self.reconstruct_path()

        if self.progress is not None:
            self.progress.finish("TSP solved successfully!")

        self.tour = path
        self.min_cost = min_cost
        self.log(f"Tour: {path}")
        self.log(f"Total Cost: {min_cost}  ({len(self.dp)} states memoized, "
                 f"{self.computed_states} evaluations)")
        return min_cost, path

    def tsp_dp(self, mask, pos):
        self.computed_states += 1
        if self.progress is not None and self.computed_states % PROGRESS_EVERY == 0:
            percent = int(self.computed_states / self.total_states * 100)
            self.progress.update(min(percent, PROGRESS_CAP))

        # every city visited: only the way home remains
        if mask == self.full_mask:
            return self.dist[pos][0]

        if (mask, pos) in self.dp:
            self.memo_hits += 1
            return self.dp[(mask, pos)]

        ans = INF
        row = self.dist[pos]
        for city in range(self.n):
            if mask & (1 << city):
                continue
            cost = row[city] + self.tsp_dp(mask | (1 << city), city)
            if cost < ans:
                ans = cost

        self._store(mask, pos, ans)
        return ans

    def _store(self, mask, pos, cost):
        old = self.dp.get((mask, pos))
        if old is not None and old != cost:
            raise RuntimeError(
                f"State (mask={mask:#b}, pos={pos}) rewritten: {old} -> {cost}")
        self.dp[(mask, pos)] = cost

    def _state_cost(self, mask, pos):
        if mask == self.full_mask:
            return self.dist[pos][0]
        if (mask, pos) in self.dp:
            return self.dp[(mask, pos)]
        # not reached after a full forward pass
        self.log(f"State (mask={mask:#b}, pos={pos}) missing from memo, recomputing")
        return self.tsp_dp(mask, pos)

    def reconstruct_path(self):
        path = [0]
        mask, pos = 1, 0

        while mask != self.full_mask:
            next_city = None
            best = None
            for city in range(self.n):
                if mask & (1 << city):
                    continue
                cost = self.dist[pos][city] + self._state_cost(mask | (1 << city), city)
                cost = min(cost, INF)
                # strict < keeps the lowest index on ties
                if best is None or cost < best:
                    best = cost
                    next_city = city

            path.append(next_city)
            mask |= 1 << next_city
            pos = next_city

        path.append(0)
        return path

    def get_path(self):
        return self.tour

    def get_cost(self):
        return self.min_cost
