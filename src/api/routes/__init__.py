"""FastAPI route modules.

One module per integration mode; main.py mounts the modes enabled in config.
"""

from src.api.routes import rates, rdi_check

__all__ = [
    "rates",
    "rdi_check",
]
