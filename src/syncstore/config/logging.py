"""Shared logging helpers for SyncStore."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with defaults suited to CLI output.

    Pass ``force=True`` to reconfigure during tests or when the CLI raises verbosity.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
