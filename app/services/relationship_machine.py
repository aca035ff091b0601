# app/services/relationship_machine.py
# -*- coding: utf-8 -*-
"""
Cycle de vie des demandes d'amis.

États : pending, accepted, rejected (+ "absent" = pas de ligne).

    absent   --send(requester)-->          pending
    pending  --accept(receiver)-->         accepted
    pending  --reject(receiver)-->         rejected
    pending  --delete(requester)-->        absent   (annulation)
    accepted --delete(l'un ou l'autre)-->  absent   (fin d'amitié)
    rejected --delete(l'un ou l'autre)-->  absent

Invariant : pour une paire non ordonnée {A, B}, au plus une ligne pending/accepted.
Le store doit rendre "vérification + insertion" atomique (insert_pending lève
ConflictError si une ligne active existe déjà) ; le service ne fait que la pré-vérification
pour renvoyer un message précis.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from app.services.entries import require_id
from app.services.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"
STATUSES = (PENDING, ACCEPTED, REJECTED)
ACTIVE_STATUSES = (PENDING, ACCEPTED)


@dataclass(frozen=True)
class Relationship:
    id: int
    requester_id: int
    receiver_id: int
    status: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    def involves(self, user_id: int) -> bool:
        return user_id in (self.requester_id, self.receiver_id)

    def other_party(self, user_id: int) -> int:
        return self.receiver_id if self.requester_id == user_id else self.requester_id


@dataclass(frozen=True)
class Friend:
    relationship_id: int
    friend_user_id: int
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class RelationshipStore(Protocol):
    def find_between(self, a: int, b: int, statuses: Sequence[str]) -> List[Relationship]: ...
    def insert_pending(self, requester_id: int, receiver_id: int) -> Relationship: ...
    def get(self, relationship_id: int) -> Optional[Relationship]: ...
    def update_status(self, relationship_id: int, status: str) -> Relationship: ...
    def delete(self, relationship_id: int) -> bool: ...
    def list_for_actor(self, actor_id: int, status: str, role: Optional[str] = None) -> List[Relationship]: ...


class FriendshipService:
    """Applique les gardes de rôle ; le store fournit la persistance."""

    def __init__(self, store: RelationshipStore) -> None:
        self.store = store
        self.logger = logging.getLogger(self.__class__.__name__)

    # -----------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------

    def send_request(self, actor_id: int, receiver_id: int) -> Relationship:
        require_id(actor_id, "actor_id")
        require_id(receiver_id, "receiver_id")
        if actor_id == receiver_id:
            raise ValidationError("Cannot send friend request to yourself")

        for existing in self.store.find_between(actor_id, receiver_id, ACTIVE_STATUSES):
            if existing.status == ACCEPTED:
                raise ConflictError("Already friends")
            if existing.requester_id == actor_id:
                raise ConflictError("Friend request already sent")
            raise ConflictError("You have a pending request from this user")

        rel = self.store.insert_pending(actor_id, receiver_id)
        self.logger.info(f"Friend request {rel.id}: {actor_id} -> {receiver_id}")
        return rel

    def accept(self, actor_id: int, relationship_id: int) -> Relationship:
        return self._respond(actor_id, relationship_id, ACCEPTED)

    def reject(self, actor_id: int, relationship_id: int) -> Relationship:
        return self._respond(actor_id, relationship_id, REJECTED)

    def delete(self, actor_id: int, relationship_id: int) -> None:
        """Annulation (pending, demandeur seulement) ou suppression (accepted/rejected, l'un ou l'autre)."""
        rel = self._load_for(actor_id, relationship_id)
        if rel.status == PENDING and rel.requester_id != actor_id:
            raise AuthorizationError("Cannot cancel requests you did not send")
        if not self.store.delete(rel.id):
            raise NotFoundError(f"Friend request {relationship_id} not found")
        self.logger.info(f"Relationship {rel.id} ({rel.status}) deleted by {actor_id}")

    # -----------------------------------------------------------------
    # Listes
    # -----------------------------------------------------------------

    def list_friends(self, actor_id: int) -> List[Friend]:
        require_id(actor_id, "actor_id")
        return [
            Friend(
                relationship_id=rel.id,
                friend_user_id=rel.other_party(actor_id),
                created_at=rel.created_at,
                updated_at=rel.updated_at,
            )
            for rel in self.store.list_for_actor(actor_id, ACCEPTED)
        ]

    def list_sent(self, actor_id: int) -> List[Relationship]:
        require_id(actor_id, "actor_id")
        return self.store.list_for_actor(actor_id, PENDING, role="requester")

    def list_received(self, actor_id: int) -> List[Relationship]:
        require_id(actor_id, "actor_id")
        return self.store.list_for_actor(actor_id, PENDING, role="receiver")

    def list_pending(self, actor_id: int) -> List[Relationship]:
        require_id(actor_id, "actor_id")
        return self.store.list_for_actor(actor_id, PENDING)

    def list_rejected(self, actor_id: int) -> List[Relationship]:
        """Demandes refusées, envoyées ou reçues ; l'une ou l'autre partie peut les supprimer."""
        require_id(actor_id, "actor_id")
        return self.store.list_for_actor(actor_id, REJECTED)

    def are_friends(self, a: int, b: int) -> bool:
        return any(rel.status == ACCEPTED for rel in self.store.find_between(a, b, (ACCEPTED,)))

    # -----------------------------------------------------------------
    # Internes
    # -----------------------------------------------------------------

    def _load_for(self, actor_id: int, relationship_id: int) -> Relationship:
        require_id(actor_id, "actor_id")
        require_id(relationship_id, "relationship_id")
        rel = self.store.get(relationship_id)
        if rel is None:
            raise NotFoundError(f"Friend request {relationship_id} not found")
        if not rel.involves(actor_id):
            raise AuthorizationError(f"User {actor_id} is not part of request {relationship_id}")
        return rel

    def _respond(self, actor_id: int, relationship_id: int, new_status: str) -> Relationship:
        rel = self._load_for(actor_id, relationship_id)
        if rel.receiver_id != actor_id:
            raise AuthorizationError("Only the receiver can answer a friend request")
        if rel.status != PENDING:
            raise ConflictError(f"Friend request already processed ({rel.status})")
        updated = self.store.update_status(rel.id, new_status)
        self.logger.info(f"Friend request {rel.id} {new_status} by {actor_id}")
        return updated
