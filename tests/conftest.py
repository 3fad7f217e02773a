import pytest

from zkfloat.circuit import ConstraintSystem


@pytest.fixture
def cs():
    """Fresh constraint system over the BN254 scalar field."""
    return ConstraintSystem()
