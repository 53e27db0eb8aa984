import logging

import pytest


@pytest.fixture(autouse=True)
def reset_gre_logger():
    """Drop handlers set up by setup_logging so they don't outlive captured streams"""
    yield
    logger = logging.getLogger('gre')
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
