from dataclasses import dataclass
from typing import Optional

from sqlmodel import SQLModel

from models import (
    ACCOUNT_STATUSES,
    SUBMISSION_STATUSES,
    Account,
    Donation,
    Request as RequestModel,
    Role,
    Status,
)


@dataclass(frozen=True)
class EntityKind:
    """
    Describes one kind of entity that goes through admin approval.

    owner_field is None for accounts: an account owns itself.
    """

    name: str
    label: str
    model: type[SQLModel]
    statuses: frozenset[Status]
    owner_field: Optional[str] = None
    owner_role: Optional[Role] = None

    def owner_id(self, entity) -> Optional[int]:
        if self.owner_field is None:
            return entity.id
        return getattr(entity, self.owner_field)


ACCOUNT = EntityKind(
    name="account",
    label="User",
    model=Account,
    statuses=ACCOUNT_STATUSES,
)

DONATION = EntityKind(
    name="donation",
    label="Donation",
    model=Donation,
    statuses=SUBMISSION_STATUSES,
    owner_field="donor_id",
    owner_role=Role.DONOR,
)

REQUEST = EntityKind(
    name="request",
    label="Request",
    model=RequestModel,
    statuses=SUBMISSION_STATUSES,
    owner_field="school_id",
    owner_role=Role.SCHOOL,
)

# kinds whose rows belong to an account and go with it on deletion
OWNED_KINDS = (DONATION, REQUEST)
