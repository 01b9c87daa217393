import argparse
import sys
import time
from pathlib import Path

from tsp_bitmask.held_karp import TSPHeldKarp
from tsp_bitmask.loader import load_csv, load_matrix
from tsp_bitmask.progress import TqdmProgress
from tsp_bitmask.report import format_matrix, format_solution

WARN_CITIES = 15
MAX_CITIES = 20


def confirm(prompt):
    try:
        answer = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def ask_file_path():
    while True:
        file_path = input("Enter the path to your matrix file: ").strip()
        if Path(file_path).is_file():
            return file_path
        print("File not found! Please check the path and try again.")
        print()


def build_parser():
    parser = argparse.ArgumentParser(
        description="Exact TSP solver (Held-Karp dynamic programming with bitmask)")
    parser.add_argument("input", type=str, nargs="?", default=None,
                        help="Matrix or edge-list file (first line: number of cities). "
                             "Asked for interactively when omitted.")
    parser.add_argument("--csv", action="store_true",
                        help="Read a labelled CSV distance matrix instead (pandas, index_col=0).")
    parser.add_argument("--threshold", type=float, default=None,
                        help="With --csv, distances >= threshold are treated as missing edges.")
    parser.add_argument("--yes", action="store_true",
                        help=f"Do not ask for confirmation above {MAX_CITIES} cities.")
    parser.add_argument("--quiet", action="store_true", help="No progress bar.")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.threshold is not None and not args.csv:
        parser.error("--threshold only applies together with --csv")

    try:
        file_path = args.input
        if file_path is None:
            file_path = ask_file_path()

        print(f"Reading from file: {file_path}")
        if args.csv:
            dist, names = load_csv(file_path, max_threshold=args.threshold)
        else:
            dist, names = load_matrix(file_path), None

        print("Distance Matrix:")
        print(format_matrix(dist, names))
        print()

        n = len(dist)
        if n > MAX_CITIES:
            print(f"Large matrix detected ({n} cities). This will take exponential time!")
            if not args.yes and not confirm(f"Continue anyway? (Not recommended for n > {MAX_CITIES})"):
                print("Operation cancelled.")
                return 0
        elif n > WARN_CITIES:
            print(f"Medium-large matrix ({n} cities). This may take some time.")

        start = time.time()
        solver = TSPHeldKarp(dist)
        if not args.quiet:
            solver.progress = TqdmProgress()
        cost, path = solver.solve()
        elapsed = time.time() - start
    except (ValueError, OSError, EOFError) as e:
        print(f"Error: {str(e) or 'no input'}", file=sys.stderr)
        return 1

    print(format_solution(cost, path, elapsed, solver, names))
    return 0


if __name__ == "__main__":
    sys.exit(main())
