#!/usr/bin/env python
"""
Launch the Streamlit quote calculator.

Usage:
    python scripts/run_app.py [PORT]
"""
import os
import subprocess
import sys
from pathlib import Path


def main():
    project_root = Path(__file__).parent.parent
    ui_path = project_root / 'src' / 'kitchen_quote' / 'ui' / 'app_streamlit.py'

    if not ui_path.exists():
        print(f"ERROR: Streamlit UI not found at {ui_path}")
        sys.exit(1)

    port = sys.argv[1] if len(sys.argv) > 1 else "8501"

    # The UI imports kitchen_quote from src/ even without an install
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root / 'src'), env.get("PYTHONPATH")]))

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path), '--server.port', port]
    print(f"Starting quote calculator on port {port}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nCalculator stopped.")


if __name__ == "__main__":
    main()
