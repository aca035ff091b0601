# app/persistence/repositories/friends_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, or_, and_
from sqlalchemy.exc import IntegrityError
from app.persistence.models import FriendRequest
from app.services.errors import ConflictError, NotFoundError, ValidationError
from app.services.relationship_machine import PENDING, STATUSES, Relationship

def pair_key(a: int, b: int) -> str:
    lo, hi = sorted((int(a), int(b)))
    return f"{lo}:{hi}"

def _to_rel(row: FriendRequest) -> Relationship:
    return Relationship(
        id=row.id,
        requester_id=row.requester_id,
        receiver_id=row.receiver_id,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )

class FriendRequestRepository:
    """
    Store des relations. insert_pending s'appuie sur l'index unique partiel
    (pair_key, status actif) : vérification + insertion atomiques côté base.
    """

    def __init__(self, db):
        self.db = db

    def find_between(self, a: int, b: int, statuses):
        with self.db.get_session() as s:
            stmt = select(FriendRequest).where(
                FriendRequest.pair_key == pair_key(a, b),
                FriendRequest.status.in_(list(statuses)),
            ).order_by(FriendRequest.id.asc())
            return [_to_rel(r) for r in s.scalars(stmt)]

    def insert_pending(self, requester_id: int, receiver_id: int) -> Relationship:
        with self.db.get_session() as s:
            row = FriendRequest(
                requester_id=requester_id,
                receiver_id=receiver_id,
                status=PENDING,
                pair_key=pair_key(requester_id, receiver_id),
            )
            s.add(row)
            try:
                s.flush()
            except IntegrityError as e:
                raise ConflictError("Une demande active existe déjà pour cette paire") from e
            s.refresh(row)
            return _to_rel(row)

    def get(self, relationship_id: int) -> Relationship | None:
        with self.db.get_session() as s:
            row = s.get(FriendRequest, relationship_id)
            return _to_rel(row) if row else None

    def update_status(self, relationship_id: int, status: str) -> Relationship:
        if status not in STATUSES:
            raise ValidationError(f"Statut invalide: {status}")
        with self.db.get_session() as s:
            row = s.get(FriendRequest, relationship_id)
            if not row:
                raise NotFoundError(f"Friend request {relationship_id} not found")
            row.status = status
            s.add(row)
            try:
                s.flush()
            except IntegrityError as e:
                raise ConflictError("Une relation active existe déjà pour cette paire") from e
            s.refresh(row)
            return _to_rel(row)

    def delete(self, relationship_id: int) -> bool:
        with self.db.get_session() as s:
            row = s.get(FriendRequest, relationship_id)
            if not row:
                return False
            s.delete(row)
            return True

    def list_for_actor(self, actor_id: int, status: str, role: str | None = None):
        """
        role=None        -> actor demandeur OU destinataire
        role="requester" -> envoyées ; role="receiver" -> reçues
        Plus récentes d'abord.
        """
        if role == "requester":
            who = FriendRequest.requester_id == actor_id
        elif role == "receiver":
            who = FriendRequest.receiver_id == actor_id
        elif role is None:
            who = or_(FriendRequest.requester_id == actor_id, FriendRequest.receiver_id == actor_id)
        else:
            raise ValidationError(f"Rôle invalide: {role}")
        with self.db.get_session() as s:
            stmt = (
                select(FriendRequest)
                .where(and_(who, FriendRequest.status == status))
                .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
            )
            return [_to_rel(r) for r in s.scalars(stmt)]
