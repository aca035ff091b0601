# app/persistence/repositories/users_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from app.persistence.models import User, Profile
from app.services.entries import normalize_date
from app.services.errors import ConflictError, NotFoundError, ValidationError

DEFAULT_PROFILE_COLOR = "#3b82f6"

class UserRepository:
    def __init__(self, db):
        self.db = db

    def create(self, email: str, display_name: str | None = None) -> User:
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email requis")
        with self.db.get_session() as s:
            u = User(email=email, display_name=display_name)
            s.add(u)
            try:
                s.flush()
            except IntegrityError as e:
                raise ConflictError(f"Email déjà utilisé: {email}") from e
            s.refresh(u); s.expunge(u)
            return u

    def get(self, user_id: int) -> User | None:
        with self.db.get_session() as s:
            u = s.get(User, user_id)
            if not u:
                return None
            s.expunge(u)
            return u

    def get_by_email(self, email: str) -> User | None:
        with self.db.get_session() as s:
            u = s.scalar(select(User).where(User.email == email.strip().lower()))
            if not u:
                return None
            s.expunge(u)
            return u

    def get_or_create(self, email: str, display_name: str | None = None) -> User:
        u = self.get_by_email(email)
        return u or self.create(email=email, display_name=display_name)

    def set_display_name(self, email: str, value: str | None) -> None:
        with self.db.get_session() as s:
            u = s.scalar(select(User).where(User.email == email.strip().lower()))
            if not u:
                raise NotFoundError(f"Utilisateur introuvable: {email}")
            u.display_name = value
            s.add(u)


class ProfileRepository:
    """Membres de la famille suivis par un utilisateur."""

    def __init__(self, db):
        self.db = db

    def create(self, user_id: int, name: str, color: str | None = None, email=None, phone=None, date_of_birth=None) -> Profile:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        dob = normalize_date(date_of_birth) if date_of_birth else None
        with self.db.get_session() as s:
            p = Profile(
                user_id=user_id, name=name, color=color or DEFAULT_PROFILE_COLOR,
                email=email or None, phone=phone or None, date_of_birth=dob,
            )
            s.add(p)
            s.flush(); s.refresh(p); s.expunge(p)
            return p

    def get(self, profile_id: int) -> Profile | None:
        with self.db.get_session() as s:
            p = s.get(Profile, profile_id)
            if not p:
                return None
            s.expunge(p)
            return p

    def list_for_user(self, user_id: int):
        with self.db.get_session() as s:
            stmt = select(Profile).where(Profile.user_id == user_id).order_by(Profile.created_at.asc(), Profile.id.asc())
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows

    def get_or_create_default(self, user_id: int, name: str) -> Profile:
        rows = self.list_for_user(user_id)
        return rows[0] if rows else self.create(user_id, name)

    def update(self, user_id: int, profile_id: int, **fields) -> Profile:
        allowed = {"name", "color", "email", "phone", "date_of_birth"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValidationError(f"Champs inconnus: {sorted(unknown)}")
        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationError("Name is required")
        if fields.get("date_of_birth"):
            fields["date_of_birth"] = normalize_date(fields["date_of_birth"])
        with self.db.get_session() as s:
            p = s.scalar(select(Profile).where(Profile.id == profile_id, Profile.user_id == user_id))
            if not p:
                raise NotFoundError(f"Profil introuvable: {profile_id}")
            for k, v in fields.items():
                setattr(p, k, v)
            s.add(p); s.flush(); s.refresh(p); s.expunge(p)
            return p

    def delete(self, user_id: int, profile_id: int) -> bool:
        with self.db.get_session() as s:
            p = s.scalar(select(Profile).where(Profile.id == profile_id, Profile.user_id == user_id))
            if not p:
                return False
            s.delete(p)
            return True
