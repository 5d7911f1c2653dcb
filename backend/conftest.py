import sys
from pathlib import Path


# Tests import the flat modules under backend/src (config, models, services.*) directly.
SRC = Path(__file__).resolve().parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
