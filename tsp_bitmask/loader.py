"""
Readers that turn distance files into a square integer matrix for TSPHeldKarp.

Text format, first line is the number of cities ``n``, then either

* ``n`` rows of ``n`` integers (``INF`` or ``∞`` for a missing edge), or
* any number of ``from to weight`` lines (undirected; unlisted pairs are INF).

A file with exactly ``n`` data lines is read as a matrix, unless every line
holds three values and ``n != 3``. For ``n == 3`` the two formats cannot be
told apart and the matrix reading wins: write such edge lists with a
different number of lines (for example, list an edge twice).
"""
import numpy as np
import pandas as pd

from tsp_bitmask.held_karp import INF

INF_TOKENS = ("INF", "∞")


def _parse_token(token):
    token = token.strip().upper()
    if token in INF_TOKENS:
        return INF
    return int(token)


def _is_matrix(rows, n):
    if len(rows) != n:
        return False
    if n != 3 and all(len(row.split()) == 3 for row in rows):
        return False
    return True


def parse_input(content):
    lines = [line.strip() for line in content.strip().splitlines() if line.strip()]
    if not lines:
        raise ValueError("Empty input file")

    try:
        n = int(lines[0])
    except ValueError:
        raise ValueError(f"Invalid number of cities: {lines[0]!r}") from None
    if n <= 0:
        raise ValueError("Number of cities must be greater than 0")

    # adjacency matrix
    if _is_matrix(lines[1:], n):
        distances = []
        for i, line in enumerate(lines[1:]):
            try:
                row = [_parse_token(tok) for tok in line.split()]
            except ValueError:
                raise ValueError(f"Invalid number in row {i + 1}") from None
            if len(row) != n:
                raise ValueError(f"Row {i} has {len(row)} values, expected {n}")
            distances.append(row)
        return distances

    # edge list
    distances = [[0 if i == j else INF for j in range(n)] for i in range(n)]
    for line_num, line in enumerate(lines[1:], start=2):
        parts = line.split()
        if len(parts) != 3:
            raise ValueError(f"Line {line_num}: Expected 3 values (from to weight)")

        fields = []
        for name, token in zip(("from", "to", "weight"), parts):
            try:
                fields.append(int(token))
            except ValueError:
                label = "weight" if name == "weight" else f"'{name}' city"
                raise ValueError(f"Line {line_num}: Invalid {label}") from None
        u, v, w = fields

        if not (0 <= u < n and 0 <= v < n):
            raise ValueError(f"Line {line_num}: City index out of range")
        distances[u][v] = w
        distances[v][u] = w

    return distances


def load_matrix(file_path):
    with open(file_path, "r", encoding="utf-8") as f:
        content = f.read()
    return parse_input(content)


def load_csv(file_path, max_threshold=None):
    """
    Labelled distance matrix (first column = city names), as in the map/*.csv
    files. Values at or above ``max_threshold`` and blanks mean no edge.
    Distances are rounded to integers and the diagonal is set to 0.
    Returns ``(matrix, city_names)``.
    """
    df = pd.read_csv(file_path, index_col=0)
    if df.shape[0] != df.shape[1]:
        raise ValueError(f"CSV matrix must be square, got shape {df.shape}")

    values = df.to_numpy(dtype=float)
    missing = np.isnan(values)
    if max_threshold is not None:
        missing |= values >= max_threshold

    matrix = np.rint(np.where(missing, 0, values)).astype(np.int64)
    matrix[missing] = INF
    np.fill_diagonal(matrix, 0)
    return matrix.tolist(), [str(name) for name in df.index]
