"""
pytest configuration for nodejs-dist tests.

Adds src directory to Python path for imports and sets up test environment.
"""

import os
import sys
from pathlib import Path

# Tests must not pick up a developer's mirror or output overrides
for _var in ("NODEJS_VERSION", "NODEJS_DIST_OUTPUT_DIR", "NODEJS_DIST_BASE_URL", "NODEJS_DIST_LOG_LEVEL"):
    os.environ.pop(_var, None)

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))
