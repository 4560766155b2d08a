import os
import tempfile

# Keep progress state and the run log written by the solver out of the working tree.
_TMP = tempfile.gettempdir()
os.environ.setdefault("PROGRESS_STATE_FILE", os.path.join(_TMP, f"pack_score_progress_{os.getpid()}.json"))
os.environ.setdefault("ATTEMPT_LOG_FILE", os.path.join(_TMP, f"pack_score_run_{os.getpid()}.log"))
