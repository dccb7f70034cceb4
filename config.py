# config.py
import os

# ======= Island shape limits =======
MIN_ISLAND_SIZE       = int(os.getenv("GEODE_MIN_ISLAND_SIZE", "4"))
MAX_ISLAND_SIZE       = int(os.getenv("GEODE_MAX_ISLAND_SIZE", "12"))

# Hard cap on new shapes created while growing from one crystal.  This bounds
# both memory and the branching factor of the search.
MAX_SHAPES_PER_TARGET = int(os.getenv("GEODE_MAX_SHAPES_PER_TARGET", "1000"))

# ======= Search budget / scoring =======
TIMEOUT_SEC           = float(os.getenv("GEODE_TIMEOUT_SEC", "10"))
ISLAND_COST           = float(os.getenv("GEODE_ISLAND_COST", "1.0"))

# ======= Exact (CP-SAT) cross-check =======
CP_SAT_SECONDS               = float(os.getenv("GEODE_CP_SAT_SECONDS", "30"))
CP_SAT_MAX_SHAPES_PER_TARGET = int(os.getenv("GEODE_CP_SAT_MAX_SHAPES_PER_TARGET", "60"))
CP_SAT_WORKERS               = int(os.getenv("GEODE_CP_SAT_WORKERS", "1"))

# ======= Benchmark =======
BENCH_FILE  = os.getenv("GEODE_BENCH_FILE", "geodes.txt")
BENCH_LIMIT = int(os.getenv("GEODE_BENCH_LIMIT", "50"))

# ======= Output names =======
SOLUTION_OUT = os.getenv("GEODE_SOLUTION_OUT", "solution.txt")
LAYOUT_HTML  = os.getenv("GEODE_LAYOUT_HTML", "layout_view.html")

# Empty string disables the attempt log file.
ATTEMPT_LOG  = os.getenv("GEODE_ATTEMPT_LOG", os.path.join("logs", "solver_attempts.log"))

class CFG:
    MIN_ISLAND_SIZE       = MIN_ISLAND_SIZE
    MAX_ISLAND_SIZE       = MAX_ISLAND_SIZE
    MAX_SHAPES_PER_TARGET = MAX_SHAPES_PER_TARGET

    TIMEOUT_SEC = TIMEOUT_SEC
    ISLAND_COST = ISLAND_COST

    CP_SAT_SECONDS               = CP_SAT_SECONDS
    CP_SAT_MAX_SHAPES_PER_TARGET = CP_SAT_MAX_SHAPES_PER_TARGET
    CP_SAT_WORKERS               = CP_SAT_WORKERS

    BENCH_FILE  = BENCH_FILE
    BENCH_LIMIT = BENCH_LIMIT

    SOLUTION_OUT = SOLUTION_OUT
    LAYOUT_HTML  = LAYOUT_HTML
    ATTEMPT_LOG  = ATTEMPT_LOG

__all__ = ["CFG"]
