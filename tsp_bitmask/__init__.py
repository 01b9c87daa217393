from tsp_bitmask.held_karp import INF, TSPHeldKarp, is_feasible, tour_cost
from tsp_bitmask.brute_force import TSPBruteForce

__all__ = ["INF", "TSPHeldKarp", "TSPBruteForce", "is_feasible", "tour_cost"]
