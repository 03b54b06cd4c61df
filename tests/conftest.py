import os
import tempfile

# main.py creates its ConfigManager at import time; keep it out of the source tree.
os.environ.setdefault(
    "FITMENT_CONFIG_FILE",
    os.path.join(tempfile.mkdtemp(prefix="fitment-test-"), "user_config.json"),
)
