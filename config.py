# config.py
import os

# ======= Search =======
# Processes used to fan out the top-level branches (1 = serial search).
WORKERS         = int(os.getenv("PK_WORKERS", "1"))

# Keep every complete configuration in memory.  With 0 the run only keeps the
# running solution count and the max-score configurations.
KEEP_SOLUTIONS  = int(os.getenv("PK_KEEP_SOLUTIONS", "1")) != 0

# ======= CP-SAT optimum cross-check =======
CP_SAT_CHECK    = int(os.getenv("PK_CP_SAT_CHECK", "0")) != 0
CP_SAT_SECONDS  = float(os.getenv("PK_CP_SAT_SECONDS", "30"))
CP_SAT_ISOLATE  = int(os.getenv("PK_CP_SAT_ISOLATE", "1")) != 0
MAX_MEMORY_MB   = int(os.getenv("PK_MAX_MEMORY_MB", "2048"))

# ======= Reporting =======
PROGRESS_EVERY  = int(os.getenv("PK_PROGRESS_EVERY", "1000"))
MAX_RENDERED    = int(os.getenv("PK_MAX_RENDERED", "50"))

# ======= Output names =======
SOLUTIONS_OUT   = os.getenv("PK_SOLUTIONS_OUT", "solutions.txt")
LAYOUT_HTML     = os.getenv("PK_LAYOUT_HTML", "layout_view.html")


class CFG:
    WORKERS        = WORKERS
    KEEP_SOLUTIONS = KEEP_SOLUTIONS

    CP_SAT_CHECK   = CP_SAT_CHECK
    CP_SAT_SECONDS = CP_SAT_SECONDS
    CP_SAT_ISOLATE = CP_SAT_ISOLATE
    MAX_MEMORY_MB  = MAX_MEMORY_MB

    PROGRESS_EVERY = PROGRESS_EVERY
    MAX_RENDERED   = MAX_RENDERED

    SOLUTIONS_OUT  = SOLUTIONS_OUT
    LAYOUT_HTML    = LAYOUT_HTML


__all__ = ["CFG"]
