# run_mtfengine.py (repo root)
import sys
from pathlib import Path
import runpy
from dotenv import load_dotenv

if __name__ == "__main__":
    ROOT = Path(__file__).parent.resolve()
    # .env before the run (override=True so it always wins)
    load_dotenv(ROOT / ".env", override=True)

    if str(ROOT) not in sys.path:
        sys.path.insert(0, str(ROOT))

    # same as python -m mtfengine.app
    runpy.run_module("mtfengine.app", run_name="__main__")
