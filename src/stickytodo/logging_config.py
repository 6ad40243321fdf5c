# stickytodo/logging_config.py
import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
_configured = False


def setup_logging(verbose: bool = False) -> None:
    """Configures the root logger once with a Rich handler on stderr."""
    global _configured
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
