import pytest

from ec_group import NID_SECP224R1, get_ec_group
from scratch_context import Context

@pytest.fixture
def ctx():
    """Contexte de calcul propre à chaque test"""
    return Context()

@pytest.fixture
def group():
    return get_ec_group(NID_SECP224R1)
