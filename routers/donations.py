from typing import Optional

from fastapi import APIRouter, Request

from db import SessionDep
from errors import envelope
from guards import require_role, require_visible
from kinds import DONATION
from models import Account, Role
from schemas import DonationCreate
from views import submission_json, submissions_json
from workflow import ApprovalWorkflow

from .admin import build_admin_router
from .auth import CurrentAccountDep, OptionalAccountDep, StorageDep
from .forms import parse_model, read_payload

router = APIRouter(tags=["donations"])
router.include_router(
    build_admin_router(
        DONATION,
        collection_key="donations",
        item_key="donation",
        serialize_many=lambda session, entities: submissions_json(session, DONATION, entities),
    )
)


@router.post("", status_code=201)
async def create_donation(
    request: Request,
    session: SessionDep,
    storage: StorageDep,
    current: CurrentAccountDep,
):
    """
    Submit a donation offer. Only verified donors; starts out pending.
    An ``image`` upload, when sent as form-data, becomes image_url.
    """
    workflow = ApprovalWorkflow(DONATION, session)
    workflow.authorize_submit(current)

    data, files = await read_payload(request)
    fields = parse_model(DonationCreate, data).model_dump()

    stored = storage.save_fields(files, "donation", ("image",))
    if "image" in stored:
        fields["image_url"] = stored["image"]

    donation = workflow.submit(current, fields)
    return envelope(
        True,
        "Donation submitted successfully! Awaiting admin approval.",
        donation=submission_json(DONATION, donation, current),
    )


@router.get("")
def list_donations(session: SessionDep, donation_type: Optional[str] = None):
    """
    Verified donations, newest first, optionally filtered by type.
    """
    donations = ApprovalWorkflow(DONATION, session).list_public(donation_type=donation_type)
    return envelope(
        True,
        count=len(donations),
        donations=submissions_json(session, DONATION, donations),
    )


@router.get("/mine")
def list_my_donations(session: SessionDep, current: CurrentAccountDep):
    require_role(current, Role.DONOR)
    donations = ApprovalWorkflow(DONATION, session).find(owner_id=current.id)
    return envelope(
        True,
        count=len(donations),
        donations=submissions_json(session, DONATION, donations),
    )


@router.get("/{donation_id}")
def get_donation(donation_id: int, session: SessionDep, current: OptionalAccountDep):
    donation = ApprovalWorkflow(DONATION, session).get(donation_id)
    require_visible(current, DONATION, donation)
    donor = session.get(Account, donation.donor_id)
    return envelope(True, donation=submission_json(DONATION, donation, donor))


@router.put("/{donation_id}/complete")
@router.put("/complete/{donation_id}")
def complete_donation(donation_id: int, session: SessionDep, current: CurrentAccountDep):
    """
    Owner marks a verified donation as delivered.
    """
    donation = ApprovalWorkflow(DONATION, session).complete(current, donation_id)
    return envelope(
        True,
        "Donation marked as completed successfully",
        donation=submission_json(DONATION, donation, current),
    )
