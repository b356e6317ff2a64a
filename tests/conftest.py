"""
Shared pytest fixtures for the cpamm test suite.
"""

import logging

import pytest

from cpamm_core.liquidity import add_liquidity
from cpamm_core.manager import PoolManager
from cpamm_core.pool import create_pool

# Byte-wise ASSET_HI > ASSET_LO
ASSET_HI = bytes([0xAA]) * 32
ASSET_LO = bytes([0x11]) * 32
ADMIN = bytes([0x0A]) * 32
RECIPIENT = bytes([0x0B]) * 32
STRANGER = bytes([0x0C]) * 32


@pytest.fixture(autouse=True)
def _reset_cpamm_logger():
    """setup_logging() detaches the cpamm tree from root; undo that."""
    yield
    logger = logging.getLogger("cpamm")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def empty_pool():
    """Empty pool, 1 % fee tier."""
    return create_pool(ASSET_HI, ASSET_LO, 100)


@pytest.fixture
def funded_pool(empty_pool):
    """Pool holding (1_000_000, 2_000_000) at a 1 % fee."""
    return add_liquidity(empty_pool, 1_000_000, 2_000_000).pool


@pytest.fixture
def manager():
    return PoolManager()


@pytest.fixture
def funded_manager(manager):
    """Manager with one funded pool; returns (manager, pool_id)."""
    pool = manager.create_pool(ASSET_HI, ASSET_LO, 100)
    manager.add_liquidity(pool.pool_id, 1_000_000, 2_000_000)
    return manager, pool.pool_id
