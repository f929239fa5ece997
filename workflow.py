"""
Approval workflow shared by accounts, donations and requests.

Every entity starts in ``pending``. An admin moves it to ``verified`` or
``rejected`` (with a reason). The owner of a verified donation or request
may mark it ``completed``, which is terminal. A rejected account goes
back to ``pending`` when its owner resubmits the profile.

Each operation authorizes and validates before touching the row, then
performs a single read-modify-write and commits.
"""
import logging
from typing import Any, Iterable, Optional

from sqlmodel import Session, select

import guards
from errors import AuthorizationError, NotFound, PreconditionFailed, ValidationError
from kinds import ACCOUNT, OWNED_KINDS, EntityKind
from models import Account, Role, Status, utcnow

logger = logging.getLogger(__name__)


TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.PENDING: frozenset({Status.VERIFIED, Status.REJECTED}),
    Status.VERIFIED: frozenset({Status.VERIFIED, Status.REJECTED, Status.COMPLETED}),
    Status.REJECTED: frozenset({Status.VERIFIED, Status.REJECTED, Status.PENDING}),
    Status.COMPLETED: frozenset(),
}


def transition(kind: EntityKind, entity, target: Status, reason: Optional[str] = None) -> None:
    """
    Move entity to target, keeping rejection_reason set only while rejected.

    Raises PreconditionFailed without modifying the entity when the
    move is not allowed for this kind or from the current status.
    """
    current = Status(entity.status)
    if target not in kind.statuses:
        raise PreconditionFailed(f"{kind.label} cannot be marked as {target.value}")
    if target not in TRANSITIONS[current]:
        raise PreconditionFailed(
            f"{kind.label} cannot move from {current.value} to {target.value}"
        )

    entity.status = target.value
    entity.rejection_reason = reason if target is Status.REJECTED else None
    entity.updated_at = utcnow()


class ApprovalWorkflow:
    """Status operations for one entity kind, bound to a session."""

    def __init__(self, kind: EntityKind, session: Session):
        self.kind = kind
        self.session = session

    def get(self, entity_id: int):
        entity = self.session.get(self.kind.model, entity_id)
        if entity is None:
            raise NotFound(f"{self.kind.label} not found")
        return entity

    def find(
        self,
        statuses: Optional[Iterable[Status]] = None,
        owner_id: Optional[int] = None,
        **filters: Any,
    ) -> list:
        """Matching entities, newest first."""
        model = self.kind.model
        query = select(model)
        if statuses is not None:
            query = query.where(model.status.in_([s.value for s in statuses]))
        if owner_id is not None:
            owner_column = getattr(model, self.kind.owner_field or "id")
            query = query.where(owner_column == owner_id)
        for field, value in filters.items():
            if value is not None:
                query = query.where(getattr(model, field) == value)
        query = query.order_by(model.created_at.desc(), model.id.desc())
        return list(self.session.exec(query).all())

    def list_public(self, **filters: Any) -> list:
        return self.find(statuses=[Status.VERIFIED], **filters)

    def list_for_admin(self, caller: Account, pending_only: bool = False) -> list:
        guards.require_admin(caller)
        statuses = [Status.PENDING] if pending_only else None
        entities = self.find(statuses=statuses)
        if self.kind is ACCOUNT and not pending_only:
            entities = [e for e in entities if e.role != Role.ADMIN.value]
        return entities

    def authorize_submit(self, caller: Account) -> None:
        """The caller must hold the kind's owner role and be verified."""
        role = self.kind.owner_role
        label = self.kind.label.lower()
        if role is None:
            raise PreconditionFailed(f"{self.kind.label} cannot be submitted")
        guards.require_role(caller, role, message=f"Only {role.value}s can submit {label}s")
        if caller.status != Status.VERIFIED.value:
            raise AuthorizationError(
                f"Your account must be verified to submit {label}s"
            )

    def submit(self, caller: Account, fields: dict):
        """Create an entity owned by caller, in pending status."""
        self.authorize_submit(caller)

        entity = self.kind.model(**fields)
        setattr(entity, self.kind.owner_field, caller.id)
        entity.status = Status.PENDING.value
        entity.rejection_reason = None

        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        logger.info("%s %s submitted by account %s", self.kind.label, entity.id, caller.id)
        return entity

    def approve(self, caller: Account, entity_id: int):
        """
        Verifies the entity from any state except ``completed``. A completed
        donation or request stays completed rather than being reopened.
        """
        guards.require_admin(caller)
        entity = self.get(entity_id)
        transition(self.kind, entity, Status.VERIFIED)
        self._save(entity)
        logger.info("%s %s approved by admin %s", self.kind.label, entity_id, caller.id)
        return entity

    def reject(self, caller: Account, entity_id: int, reason: Optional[str]):
        guards.require_admin(caller)
        if reason is None or not reason.strip():
            raise ValidationError("Rejection reason is required")
        entity = self.get(entity_id)
        transition(self.kind, entity, Status.REJECTED, reason=reason)
        self._save(entity)
        logger.info("%s %s rejected by admin %s", self.kind.label, entity_id, caller.id)
        return entity

    def complete(self, caller: Account, entity_id: int):
        entity = self.get(entity_id)
        label = self.kind.label.lower()
        guards.require_owner(
            caller, self.kind, entity, message=f"You can only complete your own {label}s"
        )
        if entity.status != Status.VERIFIED.value:
            raise PreconditionFailed(f"Only verified {label}s can be marked as completed")
        transition(self.kind, entity, Status.COMPLETED)
        self._save(entity)
        logger.info("%s %s completed by owner %s", self.kind.label, entity_id, caller.id)
        return entity

    def delete(self, caller: Account, entity_id: int) -> None:
        guards.require_admin(caller)
        entity = self.get(entity_id)

        if self.kind is ACCOUNT:
            for owned in OWNED_KINDS:
                owner_column = getattr(owned.model, owned.owner_field)
                rows = self.session.exec(
                    select(owned.model).where(owner_column == entity_id)
                ).all()
                for row in rows:
                    self.session.delete(row)
            self.session.flush()

        self.session.delete(entity)
        self.session.commit()
        logger.info("%s %s deleted by admin %s", self.kind.label, entity_id, caller.id)

    def _save(self, entity) -> None:
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)


def resubmit_profile(session: Session, account: Account, patch: dict) -> Account:
    """
    Merge role-specific profile fields into account.

    A rejected account goes back to pending, with its rejection reason
    cleared, in the same write. Role, e-mail and credentials are never
    touched here.
    """
    for protected in ("id", "role", "email", "password_hash", "status", "rejection_reason"):
        patch.pop(protected, None)

    if account.status == Status.REJECTED.value:
        transition(ACCOUNT, account, Status.PENDING)
    for field, value in patch.items():
        setattr(account, field, value)
    account.updated_at = utcnow()

    session.add(account)
    session.commit()
    session.refresh(account)
    logger.info("Profile updated for account %s (status %s)", account.id, account.status)
    return account
