"""
Shared fixtures for opchain tests.
"""

import pytest

from opchain.core.contracts import ContractBuilder
from opchain.core.engine import Operation
from opchain.core.logging import configure_logging
from opchain.validation.loader import clear_cache


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Keep test output readable."""
    configure_logging(level="silent", force=True)


@pytest.fixture(autouse=True)
def fresh_contract_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def sum_contract():
    """a defaults to 1; b must be a positive integer."""
    return (
        ContractBuilder()
        .parameter("a", required=True, type="integer", default=1)
        .parameter("b", required=True, type="integer", numericality={"greater_than": 0})
        .build("sum")
    )


@pytest.fixture
def sum_operation(sum_contract):
    return Operation("sum", sum_contract, lambda params: params["a"] + params["b"])
