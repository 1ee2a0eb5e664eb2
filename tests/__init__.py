import os
import tempfile

# Keep test runs from writing into the repo's logs/ directory
os.environ.setdefault("OC_LOG_DIR", tempfile.mkdtemp(prefix="ocwatch-logs-"))
