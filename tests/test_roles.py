"""
Role codec tests.
"""

import pytest

from contact_directory.core import roles
from contact_directory.core.exceptions import InvalidRoleError, UnmappableRoleError, ValidationError
from contact_directory.core.roles import CanonicalRole, ExternalRole


@pytest.mark.parametrize("external", ["sales", "operations", "daily"])
def test_encode_decode_round_trip(external):
    assert roles.encode(roles.decode(external)) == external


def test_decode_maps_to_canonical_values():
    assert roles.decode("sales") is CanonicalRole.SALES_CONTRACT
    assert roles.decode("operations") is CanonicalRole.OPERATIONS_SERVICE
    assert roles.decode("daily") is CanonicalRole.DAILY_CONTACT


def test_mapping_is_bijective():
    decoded = {roles.decode(role.value) for role in ExternalRole}
    assert decoded == set(CanonicalRole)
    encoded = {roles.encode(role.value) for role in CanonicalRole}
    assert encoded == set(ExternalRole)


@pytest.mark.parametrize("value", ["unknown", "", "Sales", "sales_contract", None])
def test_decode_rejects_unknown_roles(value):
    with pytest.raises(InvalidRoleError) as exc_info:
        roles.decode(value)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["allowed"] == ["sales", "operations", "daily"]


def test_encode_of_corrupt_value_is_not_a_validation_error():
    with pytest.raises(UnmappableRoleError) as exc_info:
        roles.encode("account_manager")
    assert not isinstance(exc_info.value, ValidationError)
    assert exc_info.value.status_code == 500


def test_encode_rejects_external_value():
    with pytest.raises(UnmappableRoleError):
        roles.encode("sales")
