from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field
from sqlmodel import Session, select

from kinds import EntityKind
from models import Account, Role


class AccountView(BaseModel):
    """What any account exposes about itself; never the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    status: str
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class SchoolAccountView(AccountView):
    school_name: Optional[str] = None
    school_registration_id: Optional[str] = None
    school_type: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    school_contact: Optional[str] = None
    school_email: Optional[str] = None
    principal_name: Optional[str] = None
    principal_contact: Optional[str] = None
    website: Optional[str] = None
    registration_proof: Optional[str] = None
    verifying_authority: Optional[str] = None
    authority_contact: Optional[str] = None
    endorsement_letter: Optional[str] = None

    @computed_field
    @property
    def organization_name(self) -> Optional[str]:
        return self.school_name


class DonorAccountView(AccountView):
    organization_name: Optional[str] = None
    registration_number: Optional[str] = None
    organization_type: Optional[str] = None
    contact_number: Optional[str] = None
    identity_certificate: Optional[str] = None
    representative_name: Optional[str] = None
    representative_position: Optional[str] = None
    representative_email: Optional[str] = None
    representative_phone: Optional[str] = None
    reference_partner: Optional[str] = None


class VolunteerAccountView(AccountView):
    full_name: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    vehicle_type: Optional[str] = None
    availability: Optional[str] = None
    skills: Optional[str] = None
    nic_front: Optional[str] = None
    nic_back: Optional[str] = None


class PublicVolunteerView(BaseModel):
    """Listing entry for verified volunteers; no documents, no status."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    full_name: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    vehicle_type: Optional[str] = None
    availability: Optional[str] = None
    skills: Optional[str] = None
    created_at: Optional[datetime] = None


class OwnerSummary(BaseModel):
    id: int
    name: str
    organization_name: Optional[str] = None


ACCOUNT_VIEWS: dict[str, type[AccountView]] = {
    Role.SCHOOL.value: SchoolAccountView,
    Role.DONOR.value: DonorAccountView,
    Role.VOLUNTEER.value: VolunteerAccountView,
}


def project_account(account: Account) -> AccountView:
    view_cls = ACCOUNT_VIEWS.get(account.role, AccountView)
    return view_cls.model_validate(account)


def account_json(account: Account) -> dict:
    return project_account(account).model_dump(mode="json")


def owner_summary(account: Account) -> OwnerSummary:
    organization = (
        account.school_name if account.role == Role.SCHOOL.value else account.organization_name
    )
    return OwnerSummary(id=account.id, name=account.name, organization_name=organization)


def submission_json(kind: EntityKind, entity, owner: Optional[Account]) -> dict:
    """
    Donation/request as JSON, with its owner summarized under
    ``donor`` or ``school``.
    """
    data = entity.model_dump(mode="json")
    owner_key = kind.owner_role.value if kind.owner_role else "owner"
    data[owner_key] = owner_summary(owner).model_dump() if owner is not None else None
    return data


def submissions_json(session: Session, kind: EntityKind, entities: list) -> list[dict]:
    owner_ids = {kind.owner_id(entity) for entity in entities}
    owners: dict[int, Account] = {}
    if owner_ids:
        rows = session.exec(select(Account).where(Account.id.in_(list(owner_ids)))).all()
        owners = {row.id: row for row in rows}
    return [
        submission_json(kind, entity, owners.get(kind.owner_id(entity)))
        for entity in entities
    ]
