import os
import tempfile

# Keep logs/config/exports written at import time out of the real user folder.
os.environ.setdefault("RDL_HOME", tempfile.mkdtemp(prefix="rdl_test_home_"))
