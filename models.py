from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    ADMIN = "admin"
    SCHOOL = "school"
    DONOR = "donor"
    VOLUNTEER = "volunteer"


class Status(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    COMPLETED = "completed"


ACCOUNT_STATUSES = frozenset({Status.PENDING, Status.VERIFIED, Status.REJECTED})
SUBMISSION_STATUSES = frozenset(Status)


class Account(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str = Field(default=Role.DONOR.value)
    status: str = Field(default=Status.PENDING.value, index=True)
    rejection_reason: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_login: Optional[datetime] = None

    # school
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

    # donor
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

    # volunteer
    full_name: Optional[str] = None
    nic_front: Optional[str] = None
    nic_back: Optional[str] = None
    vehicle_type: Optional[str] = None
    availability: Optional[str] = None
    skills: Optional[str] = None


class Donation(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    donor_id: int = Field(foreign_key="account.id", index=True)

    organization_name: str
    contact_person: str
    email: str
    phone: str
    donation_type: str
    purpose: str
    description: str
    estimated_amount: str
    image_url: Optional[str] = None

    status: str = Field(default=Status.PENDING.value, index=True)  # pending | verified | rejected | completed
    rejection_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Request(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    school_id: int = Field(foreign_key="account.id", index=True)

    school_name: str
    contact_person: str
    contact_email: str
    contact_phone: str
    category: str
    title: str
    description: str
    quantity: str
    urgency: str
    location: str
    principal_letter: Optional[str] = None

    status: str = Field(default=Status.PENDING.value, index=True)  # pending | verified | rejected | completed
    rejection_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
