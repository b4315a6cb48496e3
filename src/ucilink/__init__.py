"""ucilink: synchronous client for UCI chess engines.

- `from ucilink import UCIEngine` to drive an engine subprocess
- `from ucilink import load_config, setup_logging` for the ambient setup
"""

__version__ = "0.1.0"

# Re-export common entry points for convenience
from ucilink.configs import load_config, save_config
from ucilink.engine import BestMove, UCIEngine, UCIEngineError
from ucilink.utils import setup_logging

__all__ = [
    "BestMove",
    "UCIEngine",
    "UCIEngineError",
    "__version__",
    "load_config",
    "save_config",
    "setup_logging",
]
