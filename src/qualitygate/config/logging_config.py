"""Logging setup shared by the CLI and the API server."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "urllib3")


def setup_logging(verbose: bool = False) -> None:
    """
    Configure root logging.

    Args:
        verbose: DEBUG when True, WARNING otherwise
    """
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    if not verbose:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
