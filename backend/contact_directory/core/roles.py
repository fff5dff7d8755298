"""
Member role codec.

Callers speak the external vocabulary (``sales``, ``operations``, ``daily``);
the store persists the canonical encoding. The two never mix: values are
decoded at the request boundary and encoded again when a row is read back.
"""

import enum
from typing import Any, Dict

from contact_directory.core.exceptions import InvalidRoleError, UnmappableRoleError


class ExternalRole(str, enum.Enum):
    """Role vocabulary exposed to API callers."""
    SALES = "sales"
    OPERATIONS = "operations"
    DAILY = "daily"


class CanonicalRole(str, enum.Enum):
    """Role encoding stored in ``contact_page_members.role``."""
    SALES_CONTRACT = "sales_contract"
    OPERATIONS_SERVICE = "operations_service"
    DAILY_CONTACT = "daily_contact"


_DECODE: Dict[ExternalRole, CanonicalRole] = {
    ExternalRole.SALES: CanonicalRole.SALES_CONTRACT,
    ExternalRole.OPERATIONS: CanonicalRole.OPERATIONS_SERVICE,
    ExternalRole.DAILY: CanonicalRole.DAILY_CONTACT,
}

_ENCODE: Dict[CanonicalRole, ExternalRole] = {
    canonical: external for external, canonical in _DECODE.items()
}

# Both tables must cover their whole enum, otherwise the codec is not a bijection.
if not len(_ENCODE) == len(_DECODE) == len(ExternalRole) == len(CanonicalRole):
    raise RuntimeError("Role tables must map every external role to exactly one canonical role")


def decode(external: Any) -> CanonicalRole:
    """
    Translate an external role into its canonical form.

    Raises:
        InvalidRoleError: if ``external`` is not one of the external values
    """
    try:
        return _DECODE[ExternalRole(external)]
    except ValueError:
        raise InvalidRoleError(external, [role.value for role in ExternalRole]) from None


def encode(canonical: Any) -> ExternalRole:
    """
    Translate a stored role back into the external vocabulary.

    Raises:
        UnmappableRoleError: if the stored value is not a canonical role
    """
    try:
        return _ENCODE[CanonicalRole(canonical)]
    except ValueError:
        raise UnmappableRoleError(canonical) from None
