from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

DonationType = Literal[
    "books", "uniforms", "digital-devices", "stationery", "furniture", "funds", "other"
]
RequestCategory = Literal[
    "books", "uniforms", "digital-devices", "stationery", "furniture", "other"
]
Urgency = Literal["low", "medium", "high"]
SchoolType = Literal["National", "Provincial", "Private", "International", "Other"]
OrganizationType = Literal[
    "NGO",
    "Company",
    "Foundation",
    "Individual",
    "Religious Group",
    "Alumni Association",
    "Other",
]
VehicleType = Literal["none", "car", "van", "truck", "bike"]


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class AccountCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["school", "donor", "volunteer"]

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return _normalize_email(value) if isinstance(value, str) else value


class LoginData(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return _normalize_email(value) if isinstance(value, str) else value


class ProfileOwner(BaseModel):
    """Credentials sent with a profile submission when there is no token."""

    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value):
        return _normalize_email(value) if isinstance(value, str) else value


class PasswordChange(BaseModel):
    current_password: str = ""
    new_password: str = ""


class RejectData(BaseModel):
    reason: Optional[str] = None


class ProfileBase(BaseModel):
    """Profile fields are all optional; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: Optional[str] = None


class SchoolProfile(ProfileBase):
    school_name: Optional[str] = None
    school_registration_id: Optional[str] = None
    school_type: Optional[SchoolType] = None
    province: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    school_contact: Optional[str] = None
    school_email: Optional[str] = None
    principal_name: Optional[str] = None
    principal_contact: Optional[str] = None
    website: Optional[str] = None
    verifying_authority: Optional[str] = None
    authority_contact: Optional[str] = None


class DonorProfile(ProfileBase):
    organization_name: Optional[str] = None
    registration_number: Optional[str] = None
    organization_type: Optional[OrganizationType] = None
    contact_number: Optional[str] = None
    representative_name: Optional[str] = None
    representative_position: Optional[str] = None
    representative_email: Optional[str] = None
    representative_phone: Optional[str] = None
    reference_partner: Optional[str] = None


class VolunteerProfile(ProfileBase):
    full_name: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    availability: Optional[str] = None
    skills: Optional[str] = None


# role -> (profile schema, document upload fields)
PROFILES: dict[str, tuple[type[ProfileBase], tuple[str, ...]]] = {
    "school": (SchoolProfile, ("registration_proof", "endorsement_letter")),
    "donor": (DonorProfile, ("identity_certificate",)),
    "volunteer": (VolunteerProfile, ("nic_front", "nic_back")),
}


class DonationCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, coerce_numbers_to_str=True)

    organization_name: str = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    donation_type: DonationType
    purpose: str = Field(min_length=1)
    description: str = Field(min_length=1)
    estimated_amount: str = Field(min_length=1)
    image_url: Optional[str] = None


class RequestCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, coerce_numbers_to_str=True)

    school_name: str = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    contact_email: EmailStr
    contact_phone: str = Field(min_length=1)
    category: RequestCategory
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    quantity: str = Field(min_length=1)
    urgency: Urgency
    location: str = Field(min_length=1)
