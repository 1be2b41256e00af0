import os
import sys
import time

import numpy as np


class Experiment:
    """Run a solver from many start nodes and keep timing and score statistics.

    ``solver`` is any callable ``solver(start) -> Solution``.
    """

    def __init__(self, solver, starts, name=None):
        self.solver = solver
        self.starts = list(starts)
        self.name = name or getattr(solver, "method_name", None) or getattr(solver, "__name__", "solver")
        self.times = []
        self.scores = []
        self.best = None

    def run(self, progress=True, bar_width=40):
        self.times = []
        self.scores = []
        self.best = None
        total = len(self.starts)
        for done, start in enumerate(self.starts, 1):
            started = time.perf_counter()
            solution = self.solver(start)
            self.times.append(time.perf_counter() - started)
            self.scores.append(solution.score)
            if self.best is None or solution.score < self.best.score:
                self.best = solution

            if progress:
                filled = int(bar_width * done / total)
                bar = "#" * filled + "-" * (bar_width - filled)
                sys.stdout.write(f"\r{self.name}: [{bar}] {100 * done // total}%")
                sys.stdout.flush()
        if progress:
            print()
        return self.best

    def summary(self):
        if not self.scores:
            raise RuntimeError("Experiment has not been run yet. Call run() first.")
        times = np.asarray(self.times)
        scores = np.asarray(self.scores)
        return {
            "runs": len(scores),
            "time_min": float(times.min()),
            "time_max": float(times.max()),
            "time_mean": float(times.mean()),
            "score_min": int(scores.min()),
            "score_max": int(scores.max()),
            "score_mean": float(scores.mean()),
        }

    def report(self):
        """Print min/max/mean time and score."""
        s = self.summary()
        print(f"{self.name} ({s['runs']} runs)")
        print(f"  Time (s): min={s['time_min']:.4f}  max={s['time_max']:.4f}  avg={s['time_mean']:.4f}")
        print(f"  Score:    min={s['score_min']}  max={s['score_max']}  avg={s['score_mean']:.1f}")


def save_path(solution, path):
    """Write the closed node sequence of a solution, one id per line."""
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(path, "w") as f:
        for node in solution.nodes:
            f.write(f"{node}\n")
