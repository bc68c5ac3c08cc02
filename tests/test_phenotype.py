import pytest
from purkplus.phenotype import Phenotype


def test_valid_phenotype_instantiation():
    """A valid Phenotype should be created without error."""
    p = Phenotype(
        patient_ID="PXYZ789",
        HPO_ID="HP:0001508",
        status=True,
        label="Failure to thrive",
    )
    assert isinstance(p, Phenotype)


@pytest.mark.parametrize("bad_hpo", ["HP:123", "0001508", "HP:ABCDEF1"])
def test_invalid_hpo_id_raises(bad_hpo):
    """Malformed HPO IDs must trigger a ValueError."""
    with pytest.raises(ValueError):
        Phenotype(patient_ID="P1", HPO_ID=bad_hpo, status=False)


def test_invalid_patient_id_raises():
    with pytest.raises(ValueError):
        Phenotype(patient_ID="P 1", HPO_ID="HP:0001508", status=True)


def test_status_must_be_bool():
    with pytest.raises(ValueError):
        Phenotype(patient_ID="P1", HPO_ID="HP:0001508", status="yes")
