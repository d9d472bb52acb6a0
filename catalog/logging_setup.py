"""Root logger configuration used by the API factory and the CLI."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once and apply *level*.

    ``basicConfig`` leaves existing handlers alone, so repeated calls (app
    factory, CLI callback, test runners) only adjust the level.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
