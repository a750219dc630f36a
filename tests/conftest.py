import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import slide_compiler` works
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from slide_compiler.measurement import MonospaceMeasurement  # noqa: E402


@pytest.fixture
def measurer():
    """Font-free metric: half an em per character, one em per line."""
    return MonospaceMeasurement(advance=0.5, line_height=1.0)
