import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """
    Install a single stream handler on the root logger.

    Level comes from the argument, then CHAMELEON_LOG_LEVEL, then INFO.
    Safe to call more than once.
    """
    if level is None:
        level = os.environ.get("CHAMELEON_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
