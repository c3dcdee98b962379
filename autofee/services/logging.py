"""Log setup shared by the autofee CLI and the API server.

Records go to the configured log file and to stderr. Stdout is left to the
statements and tables the CLI prints.
"""

import logging
import sys
from pathlib import Path

from autofee.services.config import AppConfig

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_log_level(name: str) -> int:
    """Level constant for a name such as 'debug'; INFO when the name is unknown."""
    return logging.getLevelNamesMapping().get(name.strip().upper(), logging.INFO)


def configure_logging(config: AppConfig) -> None:
    """Route all loggers to config.log_file and stderr, replacing earlier handlers."""
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=parse_log_level(config.log_level),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.FileHandler(log_path, encoding="utf-8"),
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )
