import os
import tempfile

# Keep log files and preferences of the test run out of the user's data dir.
os.environ.setdefault("DIRLAUNCHER_DATA_DIR", tempfile.mkdtemp(prefix="dirlauncher-tests-"))
os.environ.setdefault("DIRLAUNCHER_LOG_LEVEL", "WARNING")
