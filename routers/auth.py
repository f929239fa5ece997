import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import select

from db import SessionDep
from errors import (
    AuthenticationError,
    AuthorizationError,
    InternalError,
    NotFound,
    ValidationError,
    envelope,
)
from models import Account, Role, Status, utcnow
from schemas import PROFILES, AccountCreate, LoginData, ProfileOwner
from security import TokenSigner, hash_password, verify_password
from storage import LocalFileStorage
from views import account_json
from workflow import resubmit_profile

from .forms import parse_model, read_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

bearer_scheme = HTTPBearer(auto_error=False)
BearerDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


def get_token_signer(request: Request) -> TokenSigner:
    return request.app.state.tokens


def get_storage(request: Request) -> LocalFileStorage:
    return request.app.state.storage


TokenSignerDep = Annotated[TokenSigner, Depends(get_token_signer)]
StorageDep = Annotated[LocalFileStorage, Depends(get_storage)]


def get_current_account(
    session: SessionDep,
    tokens: TokenSignerDep,
    credentials: BearerDep,
) -> Account:
    """
    Reads the bearer token, verifies it and looks up the account.
    Raises 401 if the token is missing, invalid or expired.
    """
    if credentials is None:
        raise AuthenticationError("Not authorized, no token")

    account_id = tokens.read(credentials.credentials)
    if account_id is None:
        raise AuthenticationError("Not authorized, token invalid or expired")

    account = session.get(Account, account_id)
    if account is None:
        raise AuthenticationError("User not found for this token")
    return account


CurrentAccountDep = Annotated[Account, Depends(get_current_account)]


def get_optional_account(
    session: SessionDep,
    tokens: TokenSignerDep,
    credentials: BearerDep,
) -> Optional[Account]:
    """
    Like get_current_account, but returns None instead of raising 401.
    Used by public routes that show more to owners and admins.
    """
    if credentials is None:
        return None
    account_id = tokens.read(credentials.credentials)
    if account_id is None:
        return None
    return session.get(Account, account_id)


OptionalAccountDep = Annotated[Optional[Account], Depends(get_optional_account)]


def _find_by_email(session: SessionDep, email: str) -> Optional[Account]:
    return session.exec(
        select(Account).where(Account.email == email.strip().lower())
    ).first()


@router.post("/accounts", status_code=201)
async def register(request: Request, session: SessionDep, tokens: TokenSignerDep):
    """
    Step 1 of registration: name, e-mail, password and role.
    Accepts either JSON or form-data.
    """
    data, _ = await read_payload(request)
    account_in = parse_model(AccountCreate, data)

    if _find_by_email(session, account_in.email) is not None:
        raise ValidationError("Email already registered")

    account = Account(
        name=account_in.name,
        email=account_in.email,
        password_hash=hash_password(account_in.password),
        role=account_in.role,
        status=Status.PENDING.value,
    )
    session.add(account)
    session.commit()
    session.refresh(account)

    if account.id is None:
        raise InternalError("User was not created successfully")

    logger.info("Registered account %s as %s", account.id, account.role)
    return envelope(
        True,
        "Basic registration successful. Please complete your profile.",
        token=tokens.create(account.id),
        user=account_json(account),
    )


def _profile_account(
    session: SessionDep, current: Optional[Account], owner: ProfileOwner
) -> Account:
    """
    Resolves whose profile is being completed. Without a token the body
    must carry the account's e-mail and password; with one, only admins
    may name a different account.
    """
    if current is None:
        if not owner.email or not owner.password:
            raise AuthenticationError("Not authorized, no token")
        account = _find_by_email(session, owner.email)
        if account is None or not verify_password(owner.password, account.password_hash):
            raise AuthenticationError("Invalid email or password")
        return account

    if owner.email is None or owner.email == current.email:
        return current
    if current.role != Role.ADMIN.value:
        raise AuthorizationError("You can only complete your own profile")
    account = _find_by_email(session, owner.email)
    if account is None:
        raise NotFound("User not found")
    return account


@router.post("/accounts/{role}-profile")
async def complete_profile(
    role: str,
    request: Request,
    session: SessionDep,
    tokens: TokenSignerDep,
    storage: StorageDep,
    current: OptionalAccountDep,
):
    """
    Step 2 of registration: role-specific details and documents.

    The caller sends either the account's bearer token or its e-mail and
    password. A rejected account goes back to pending.
    """
    if role not in PROFILES:
        raise NotFound(f"Unknown profile type '{role}'")
    schema, file_fields = PROFILES[role]

    data, files = await read_payload(request)
    owner = parse_model(
        ProfileOwner, {key: data.pop(key) for key in ("email", "password") if key in data}
    )
    account = _profile_account(session, current, owner)
    if account.role != role:
        raise ValidationError("Invalid role for this profile")

    patch = parse_model(schema, data).model_dump(exclude_none=True)
    patch.update(storage.save_fields(files, role, file_fields))
    account = resubmit_profile(session, account, patch)

    return envelope(
        True,
        f"{role.capitalize()} profile completed successfully. Awaiting admin verification.",
        token=tokens.create(account.id),
        user=account_json(account),
    )


@router.post("/login")
async def login(request: Request, session: SessionDep, tokens: TokenSignerDep):
    """
    Log in with email + password; returns a bearer token.
    """
    data, _ = await read_payload(request)
    payload = parse_model(LoginData, data)

    account = _find_by_email(session, payload.email)
    if account is None or not verify_password(payload.password, account.password_hash):
        raise AuthenticationError("Invalid email or password")

    account.last_login = utcnow()
    session.add(account)
    session.commit()
    session.refresh(account)

    logger.info("Account %s logged in", account.id)
    return envelope(
        True,
        "Login successful",
        token=tokens.create(account.id),
        user=account_json(account),
    )


@router.post("/logout")
def logout(current: CurrentAccountDep):
    """
    Tokens are stateless; the client drops its copy.
    """
    logger.info("Account %s logged out", current.id)
    return envelope(True, "Logged out successfully")
