from typing import Callable, Optional

from fastapi import APIRouter
from sqlmodel import Session

from db import SessionDep
from errors import envelope
from kinds import EntityKind
from schemas import RejectData
from workflow import ApprovalWorkflow

from .auth import CurrentAccountDep

SerializeMany = Callable[[Session, list], list]


def build_admin_router(
    kind: EntityKind,
    collection_key: str,
    item_key: str,
    serialize_many: SerializeMany,
) -> APIRouter:
    """
    Admin review routes for one entity kind: pending/all listings,
    approve, reject and delete.

    Include it before any ``/{id}`` route of the parent router.
    """
    router = APIRouter(tags=["admin"])
    label = kind.label

    def one(session: Session, entity) -> dict:
        return serialize_many(session, [entity])[0]

    @router.get("/admin/pending")
    def list_pending(session: SessionDep, current: CurrentAccountDep):
        entities = ApprovalWorkflow(kind, session).list_for_admin(current, pending_only=True)
        return envelope(True, count=len(entities), **{collection_key: serialize_many(session, entities)})

    @router.get("/admin/all")
    def list_all(session: SessionDep, current: CurrentAccountDep):
        entities = ApprovalWorkflow(kind, session).list_for_admin(current)
        return envelope(True, count=len(entities), **{collection_key: serialize_many(session, entities)})

    @router.put("/approve/{entity_id}")
    @router.put("/{entity_id}/approve")
    def approve(entity_id: int, session: SessionDep, current: CurrentAccountDep):
        entity = ApprovalWorkflow(kind, session).approve(current, entity_id)
        return envelope(True, f"{label} approved successfully", **{item_key: one(session, entity)})

    @router.put("/reject/{entity_id}")
    @router.put("/{entity_id}/reject")
    def reject(
        entity_id: int,
        session: SessionDep,
        current: CurrentAccountDep,
        data: Optional[RejectData] = None,
    ):
        reason = data.reason if data is not None else None
        entity = ApprovalWorkflow(kind, session).reject(current, entity_id, reason)
        return envelope(True, f"{label} rejected", **{item_key: one(session, entity)})

    @router.delete("/{entity_id}")
    @router.put("/{entity_id}/delete")
    def delete(entity_id: int, session: SessionDep, current: CurrentAccountDep):
        ApprovalWorkflow(kind, session).delete(current, entity_id)
        return envelope(True, f"{label} deleted successfully")

    return router
