import networkx as nx
import pandas as pd

from tsp_bitmask.held_karp import INF, is_feasible

WIDTH = 70
DETAIL_MAX_STOPS = 12


def _label(i, names=None):
    return names[i] if names is not None else f"City{i}"


def format_path(path, names=None):
    return " → ".join(_label(i, names) for i in path)


def format_matrix(dist, names=None):
    labels = [_label(i, names) for i in range(len(dist))]
    df = pd.DataFrame(dist, index=labels, columns=labels)
    df = df.astype(object).where(df < INF, "∞")
    return df.to_string()


def finite_graph(dist):
    G = nx.DiGraph()
    G.add_nodes_from(range(len(dist)))
    G.add_edges_from((i, j) for i, row in enumerate(dist)
                     for j, w in enumerate(row) if i != j and w < INF)
    return G


def find_unreachable(dist):
    """Cities that cannot be left or entered through any finite edge."""
    G = finite_graph(dist)
    return sorted(v for v in G.nodes if G.out_degree(v) == 0 or G.in_degree(v) == 0)


def is_strongly_connected(dist):
    return nx.is_strongly_connected(finite_graph(dist))


def format_solution(cost, path, elapsed, solver, names=None):
    lines = ["", "SOLUTION".center(WIDTH), "═" * WIDTH]

    if not is_feasible(cost):
        lines.append("No valid tour found!".center(WIDTH))
        if len(solver.dist) > 1 and not is_strongly_connected(solver.dist):
            lines.append("The graph is not connected.".center(WIDTH))
        isolated = find_unreachable(solver.dist)
        if isolated:
            lines.append(f"Unreachable: {', '.join(_label(i, names) for i in isolated)}".center(WIDTH))
    else:
        lines.append(f"Minimum Cost: {cost}")
        lines.append(f"Optimal Path: {format_path(path, names)}")
        lines.append(f"Computation Time: {elapsed:.3f} s")
        lines.append(f"Cities Visited: {max(len(path) - 1, 1)}")
        lines.append(f"DP States Computed: {solver.computed_states}")

    lines.append("═" * WIDTH)

    if len(path) <= DETAIL_MAX_STOPS and is_feasible(cost) and len(path) > 1:
        lines.append("")
        lines.append("Detailed Route:")
        for step, (a, b) in enumerate(zip(path, path[1:]), start=1):
            lines.append(f"   Step {step:2}: {_label(a, names)} → {_label(b, names)} "
                         f"(distance: {solver.dist[a][b]})")

    return "\n".join(lines)
