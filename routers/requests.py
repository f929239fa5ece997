from typing import Optional

from fastapi import APIRouter, Request

from db import SessionDep
from errors import envelope
from guards import require_role, require_visible
from kinds import REQUEST
from models import Account, Role
from schemas import RequestCreate
from views import submission_json, submissions_json
from workflow import ApprovalWorkflow

from .admin import build_admin_router
from .auth import CurrentAccountDep, OptionalAccountDep, StorageDep
from .forms import parse_model, read_payload

router = APIRouter(tags=["requests"])
router.include_router(
    build_admin_router(
        REQUEST,
        collection_key="requests",
        item_key="request",
        serialize_many=lambda session, entities: submissions_json(session, REQUEST, entities),
    )
)


@router.post("", status_code=201)
async def create_request(
    request: Request,
    session: SessionDep,
    storage: StorageDep,
    current: CurrentAccountDep,
):
    """
    Submit a supply request. Only verified schools; starts out pending.
    A signed ``principal_letter`` can be attached as form-data.
    """
    workflow = ApprovalWorkflow(REQUEST, session)
    workflow.authorize_submit(current)

    data, files = await read_payload(request)
    fields = parse_model(RequestCreate, data).model_dump()
    fields.update(storage.save_fields(files, "school", ("principal_letter",)))

    supply_request = workflow.submit(current, fields)
    return envelope(
        True,
        "Request submitted successfully! Awaiting admin approval.",
        request=submission_json(REQUEST, supply_request, current),
    )


@router.get("")
def list_requests(
    session: SessionDep,
    category: Optional[str] = None,
    urgency: Optional[str] = None,
):
    """
    Verified requests, newest first, optionally filtered by category
    and urgency.
    """
    requests = ApprovalWorkflow(REQUEST, session).list_public(category=category, urgency=urgency)
    return envelope(
        True,
        count=len(requests),
        requests=submissions_json(session, REQUEST, requests),
    )


@router.get("/mine")
def list_my_requests(session: SessionDep, current: CurrentAccountDep):
    require_role(current, Role.SCHOOL)
    requests = ApprovalWorkflow(REQUEST, session).find(owner_id=current.id)
    return envelope(
        True,
        count=len(requests),
        requests=submissions_json(session, REQUEST, requests),
    )


@router.get("/{request_id}")
def get_request(request_id: int, session: SessionDep, current: OptionalAccountDep):
    supply_request = ApprovalWorkflow(REQUEST, session).get(request_id)
    require_visible(current, REQUEST, supply_request)
    school = session.get(Account, supply_request.school_id)
    return envelope(True, request=submission_json(REQUEST, supply_request, school))


@router.put("/{request_id}/complete")
@router.put("/complete/{request_id}")
def complete_request(request_id: int, session: SessionDep, current: CurrentAccountDep):
    """
    Owner marks a verified request as fulfilled.
    """
    supply_request = ApprovalWorkflow(REQUEST, session).complete(current, request_id)
    return envelope(
        True,
        "Request marked as completed successfully",
        request=submission_json(REQUEST, supply_request, current),
    )
