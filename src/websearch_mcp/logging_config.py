"""
Logging configuration for websearch-mcp.

Everything goes to stderr: in stdio mode stdout carries the MCP protocol.
"""

import logging
import sys


def setup_logging(log_level: str = "INFO") -> None:
    """Configure the root logger with a human-readable stderr handler."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    logging.basicConfig(level=level, handlers=[console], force=True)

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)
