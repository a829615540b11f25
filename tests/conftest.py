import logging

import pytest


@pytest.fixture(autouse=True)
def reset_package_logger():
    """cli.setup_logging() detaches the package logger from root; undo it."""
    yield
    logger = logging.getLogger("aic_art")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
