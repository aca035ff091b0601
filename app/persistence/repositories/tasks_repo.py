# app/persistence/repositories/tasks_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select
from app.persistence.models import DailyTask
from app.services.entries import normalize_date
from app.services.errors import NotFoundError, ValidationError

class TaskRepository:
    """Tâches libres d'un utilisateur ; toutes les opérations sont limitées à son propriétaire."""

    def __init__(self, db):
        self.db = db

    def list(self, user_id: int, date=None):
        with self.db.get_session() as s:
            stmt = select(DailyTask).where(DailyTask.user_id == user_id)
            if date is not None:
                stmt = stmt.where(DailyTask.date == normalize_date(date))
            stmt = stmt.order_by(DailyTask.created_at.asc(), DailyTask.id.asc())
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows

    def create(self, user_id: int, title: str, date) -> DailyTask:
        # `date` est le "aujourd'hui" injecté par l'appelant si non choisi
        title = str(title or "").strip()
        if not title:
            raise ValidationError("Titre de tâche requis")
        with self.db.get_session() as s:
            t = DailyTask(user_id=user_id, title=title, date=normalize_date(date), is_done=False)
            s.add(t); s.flush(); s.refresh(t); s.expunge(t)
            return t

    def update(self, user_id: int, task_id: int, is_done: bool | None = None, title: str | None = None) -> DailyTask:
        with self.db.get_session() as s:
            t = s.scalar(select(DailyTask).where(DailyTask.id == task_id, DailyTask.user_id == user_id))
            if not t:
                raise NotFoundError(f"Tâche introuvable: {task_id}")
            if is_done is not None:
                t.is_done = bool(is_done)
            if title is not None:
                title = str(title).strip()
                if not title:
                    raise ValidationError("Titre de tâche requis")
                t.title = title
            s.add(t); s.flush(); s.refresh(t); s.expunge(t)
            return t

    def delete(self, user_id: int, task_id: int) -> bool:
        with self.db.get_session() as s:
            t = s.scalar(select(DailyTask).where(DailyTask.id == task_id, DailyTask.user_id == user_id))
            if not t:
                return False
            s.delete(t)
            return True
