"""
Logging setup for the API process.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(getattr(h, "_carelens", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._carelens = True
        root.addHandler(handler)

    # uvicorn's access log duplicates the trace middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
