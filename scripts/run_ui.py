#!/usr/bin/env python3
"""Launch the layout editor (Streamlit) on http://localhost:8501."""

import subprocess
import sys
from pathlib import Path

APP = Path(__file__).resolve().parent.parent / "app" / "streamlit_app.py"

if __name__ == "__main__":
    raise SystemExit(
        subprocess.call(
            [sys.executable, "-m", "streamlit", "run", str(APP), *sys.argv[1:]]
        )
    )
