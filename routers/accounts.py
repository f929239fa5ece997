import logging

from fastapi import APIRouter, Request
from sqlmodel import select

from db import SessionDep
from errors import AuthorizationError, NotFound, envelope
from kinds import ACCOUNT
from models import Account, Role, Status, utcnow
from schemas import PROFILES, PasswordChange, ProfileBase
from security import change_password
from views import PublicVolunteerView, account_json
from workflow import resubmit_profile

from .admin import build_admin_router
from .auth import CurrentAccountDep
from .forms import parse_model, read_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])
router.include_router(
    build_admin_router(
        ACCOUNT,
        collection_key="users",
        item_key="user",
        serialize_many=lambda session, accounts: [account_json(a) for a in accounts],
    )
)


@router.get("/me")
def read_me(current: CurrentAccountDep):
    """
    The logged-in account, projected for its role.
    """
    return envelope(True, user=account_json(current))


@router.put("/me")
async def update_me(request: Request, session: SessionDep, current: CurrentAccountDep):
    """
    Edit own profile fields. Role, e-mail and password cannot be changed
    here; a rejected account goes back to pending for re-verification.
    """
    data, _ = await read_payload(request)
    schema = PROFILES[current.role][0] if current.role in PROFILES else ProfileBase
    patch = parse_model(schema, data).model_dump(exclude_none=True)
    account = resubmit_profile(session, current, patch)
    return envelope(True, "Profile updated successfully", user=account_json(account))


@router.put("/me/password")
def update_password(data: PasswordChange, session: SessionDep, current: CurrentAccountDep):
    change_password(current, data.current_password, data.new_password)
    current.updated_at = utcnow()
    session.add(current)
    session.commit()
    logger.info("Password changed for account %s", current.id)
    return envelope(True, "Password changed successfully")


@router.get("/volunteers")
def list_volunteers(session: SessionDep):
    """
    Verified volunteers, visible to everyone.
    """
    volunteers = session.exec(
        select(Account)
        .where(Account.role == Role.VOLUNTEER.value, Account.status == Status.VERIFIED.value)
        .order_by(Account.created_at.desc(), Account.id.desc())
    ).all()
    return envelope(
        True,
        count=len(volunteers),
        volunteers=[PublicVolunteerView.model_validate(v).model_dump(mode="json") for v in volunteers],
    )


@router.get("/{account_id}")
def get_account(account_id: int, session: SessionDep, current: CurrentAccountDep):
    """
    A single account; only the account itself or an admin may look.
    """
    if current.id != account_id and current.role != Role.ADMIN.value:
        raise AuthorizationError("You can only view your own account")
    account = session.get(Account, account_id)
    if account is None:
        raise NotFound("User not found")
    return envelope(True, user=account_json(account))
