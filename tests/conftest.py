# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    conftest.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

import os
import tempfile

# keep log files of imported scripts out of the project tree
os.environ.setdefault("FORKFORGE_OUTPUT_DIR", tempfile.mkdtemp(prefix="forkforge-test-"))
