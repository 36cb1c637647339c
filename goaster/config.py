"""Configuration paths and loader defaults for goaster."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("GOASTER_HOME", str(Path.home() / ".goaster"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
SUPPORTED_EXTENSIONS = {".go"}
