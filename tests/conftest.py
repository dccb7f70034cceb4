import os

# Keep test runs from appending to logs/solver_attempts.log.
os.environ.setdefault("GEODE_ATTEMPT_LOG", "")
