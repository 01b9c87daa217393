from itertools import permutations

from tsp_bitmask.held_karp import INF, as_matrix, tour_cost


class TSPBruteForce:
    def __init__(self, dist):
        self.dist = as_matrix(dist)
        self.n = len(self.dist)
        self.iterations = 0

    def run(self):
        if self.n <= 1:
            return [0], 0

        best_path, best_cost = None, INF
        # city 0 is fixed as the depot, first tour found wins ties
        for perm in permutations(range(1, self.n)):
            self.iterations += 1
            path = [0] + list(perm) + [0]
            cost = tour_cost(self.dist, path)
            if best_path is None or cost < best_cost:
                best_cost = cost
                best_path = path

        return best_path, min(best_cost, INF)
