# app/persistence/db.py
# -*- coding: utf-8 -*-
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager
import logging

from app.config import DEFAULT_DB_URL
from app.services.errors import DependencyError


class Database:
    """
    Engine + fabrique de sessions, construits explicitement puis passés aux repositories
    (pas d'engine global au niveau module).
    """

    def __init__(self, url=DEFAULT_DB_URL, echo=False):
        self.url = url or DEFAULT_DB_URL
        self.engine = create_engine(self.url, echo=echo, future=True)
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,  # important pour éviter DetachedInstanceError
            future=True,
        )
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def get_session(self):
        """Contexte gérant automatiquement commit/rollback ; les erreurs SQL deviennent DependencyError."""
        s = self.SessionLocal()
        try:
            yield s
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            self.logger.error(f"Database error: {e}")
            raise DependencyError(f"Erreur de stockage: {e.__class__.__name__}") from e
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def init_db(self, Base, drop_and_recreate=False):
        """Crée les tables (et les recrée si demandé)."""
        if drop_and_recreate:
            Base.metadata.drop_all(self.engine)
        Base.metadata.create_all(self.engine)

    def dispose(self):
        self.engine.dispose()
