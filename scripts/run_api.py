#!/usr/bin/env python
"""
Launch the Kitchen Quote API with uvicorn.

Usage:
    python scripts/run_api.py [PORT]
"""
import os
import subprocess
import sys
from pathlib import Path


def main():
    project_root = Path(__file__).parent.parent
    port = sys.argv[1] if len(sys.argv) > 1 else "8000"

    # Ensure src is in python path
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root / "src"), env.get("PYTHONPATH")]))

    print(f"Starting Kitchen Quote API on port {port}...")
    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "kitchen_quote.api.main:app",
            "--host", "0.0.0.0",
            "--port", port,
            "--reload"
        ], cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
