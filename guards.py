from typing import Optional

from errors import AuthorizationError
from kinds import EntityKind
from models import Account, Role, Status


def require_role(caller: Account, *roles: Role, message: Optional[str] = None) -> None:
    allowed = {role.value for role in roles}
    if caller.role not in allowed:
        names = ", ".join(sorted(allowed))
        raise AuthorizationError(
            message or f"Role '{caller.role}' is not authorized to access this route (requires: {names})"
        )


def require_admin(caller: Account) -> None:
    require_role(caller, Role.ADMIN, message="Admin access required")


def is_owner(caller: Optional[Account], kind: EntityKind, entity) -> bool:
    if caller is None or caller.id is None:
        return False
    return kind.owner_id(entity) == caller.id


def require_owner(caller: Account, kind: EntityKind, entity, message: Optional[str] = None) -> None:
    if not is_owner(caller, kind, entity):
        raise AuthorizationError(
            message or f"You can only manage your own {kind.label.lower()}s"
        )


def can_view(caller: Optional[Account], kind: EntityKind, entity) -> bool:
    """
    Verified entities are public; anything else is visible only to its
    owner and to admins.
    """
    if entity.status == Status.VERIFIED.value:
        return True
    if caller is not None and caller.role == Role.ADMIN.value:
        return True
    return is_owner(caller, kind, entity)


def require_visible(caller: Optional[Account], kind: EntityKind, entity) -> None:
    if not can_view(caller, kind, entity):
        raise AuthorizationError(f"This {kind.label.lower()} is not yet verified")
