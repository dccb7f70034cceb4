# benchmark.py: compare solvers over a file of geode projections
from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from config import CFG
from progress import log_attempt_detail
from projection import GeodeProjection
from render import pretty_print
from solution import Solution
from solver.islands import IslandSolver, Solver


@dataclass
class SolverReport:
    solver: Solver
    percent_total: float = 0.0
    group_total: float = 0.0
    block_total: float = 0.0
    seconds_total: float = 0.0
    runs: int = 0
    invalid: List[Solution] = field(default_factory=list)
    worst: Optional[Solution] = None
    best: Optional[Solution] = None
    first: Optional[Solution] = None

    def record(self, solution: Solution, seconds: float) -> None:
        self.runs += 1
        self.seconds_total += seconds
        self.percent_total += solution.crystal_percentage()
        self.group_total += solution.crystals_per_group()
        crystals = solution.crystal_count()
        self.block_total += solution.sticky_block_count() / crystals if crystals else 0.0
        if solution.check_if_valid():
            self.invalid.append(solution)
        if self.worst is None or self.worst.better_than(solution):
            self.worst = solution
        if self.best is None or solution.better_than(self.best):
            self.best = solution
        if self.first is None:
            self.first = solution

    def _avg(self, total: float) -> float:
        return total / self.runs if self.runs else 0.0

    @property
    def avg_percent(self) -> float:
        return self._avg(self.percent_total)

    @property
    def avg_crystals_per_group(self) -> float:
        return self._avg(self.group_total)

    @property
    def avg_blocks_per_crystal(self) -> float:
        return self._avg(self.block_total)

    @property
    def avg_seconds(self) -> float:
        return self._avg(self.seconds_total)


def compare_solvers(solvers: Sequence[Solver], projections: Sequence[GeodeProjection], *, echo=None) -> List[SolverReport]:
    """Run every solver on every projection; reports come back best first."""
    reports = [SolverReport(s) for s in solvers]
    for n, proj in enumerate(projections):
        if echo:
            echo(f"{n}/{len(projections)}")
        for report in reports:
            t0 = time.time()
            solution = report.solver.solve(proj)
            report.record(solution, time.time() - t0)

    for report in reports:
        log_attempt_detail(
            "Benchmark",
            solver=report.solver.name(),
            runs=report.runs,
            percent=f"{report.avg_percent * 100:.2f}%",
            crystals_per_group=f"{report.avg_crystals_per_group:.2f}",
            blocks_per_crystal=f"{report.avg_blocks_per_crystal:.2f}",
            invalid=len(report.invalid),
        )

    return sorted(
        reports,
        key=lambda r: (-r.avg_percent, -r.avg_crystals_per_group, r.avg_blocks_per_crystal),
    )


def _describe(solution: Optional[Solution], label: str) -> List[str]:
    if solution is None or solution.group_count() == 0:
        return []
    return [
        f"  {label} Solution: {solution.crystal_percentage() * 100:.2f}% crystals, "
        f"{solution.group_count()} groups, {solution.sticky_block_count()} blocks for "
        f"{solution.covered_crystal_count()} crystals "
        f"({solution.crystals_per_group():.2f} Crystals / Group)",
        pretty_print(solution, color_sticky_blocks=True),
    ]


def format_report(reports: Sequence[SolverReport]) -> str:
    lines: List[str] = []
    for r in reports:
        invalid_pct = (len(r.invalid) / r.runs * 100) if r.runs else 0.0
        lines.extend([
            f"{r.solver.name()}:",
            f"  Avg. Crystal Percentage: {r.avg_percent * 100:.2f}%",
            f"  Avg. Crystals / Group: {r.avg_crystals_per_group:.2f}",
            f"  Avg. Blocks / Crystal: {r.avg_blocks_per_crystal:.2f}",
            f"  Avg. Seconds: {r.avg_seconds:.2f}",
            f"  Num of Invalid Solutions: {len(r.invalid)} ({invalid_pct:.0f}%)",
        ])
        lines.extend(_describe(r.worst, "Worst"))
        lines.extend(_describe(r.best, "Best"))
        lines.extend(_describe(r.first, '"First"'))
        lines.append("")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Compare geode island solvers.")
    ap.add_argument("--file", default=CFG.BENCH_FILE, help="geode projections, blank-line separated")
    ap.add_argument("--limit", type=int, default=CFG.BENCH_LIMIT, help="only use the first N geodes")
    ap.add_argument("--timeout", type=float, default=None, help="search budget per geode (seconds)")
    ap.add_argument("--exact", action="store_true", help="also run the CP-SAT solver")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    projections = GeodeProjection.from_file(args.file)[: max(0, args.limit)]
    solvers: List[Solver] = [IslandSolver(timeout_sec=args.timeout)]
    if args.exact:
        from solver.cp_sat import ExactIslandSolver
        solvers.append(ExactIslandSolver())

    reports = compare_solvers(solvers, projections, echo=print)
    print(format_report(reports))
    return 0


if __name__ == "__main__":
    sys.exit(main())
