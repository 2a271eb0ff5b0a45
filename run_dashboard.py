#!/usr/bin/env python3
"""Direct launcher for the Budget Planner dashboard.

Runs Streamlit on ``budget_planner/dashboard.py`` with the project root on
the import path and makes sure the data directory exists first.
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
app_path = project_root / "budget_planner" / "dashboard.py"

if __name__ == "__main__":
    sys.path.insert(0, str(project_root))
    from budget_planner.config import ensure_data_directories

    ensure_data_directories()
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    subprocess.run(
        [sys.executable, "-m", "streamlit", "run", str(app_path), *sys.argv[1:]],
        env=env,
    )
