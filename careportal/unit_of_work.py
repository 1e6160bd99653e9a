"""Unit of work: one session, lazily-built repositories, explicit commit."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from .base_repo import BaseRepo
from .client_repo import ClientRepo
from .db import get_session
from .document_repo import DocumentRepo
from .incident_repo import IncidentRepo
from .jobtime_repo import JobTimeRepo
from .models import Base
from .user_repo import RoleRepo, UserRepo

T = TypeVar("T")
M = TypeVar("M", bound=Base)


class UnitOfWork:
    def __init__(self, session: Session | None = None) -> None:
        self.db = session if session is not None else get_session()
        self._repos: dict[Any, BaseRepo[Any]] = {}

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
        self.close()

    def _repo(self, key: Any, factory: Callable[[], BaseRepo[Any]]) -> Any:
        repo = self._repos.get(key)
        if repo is None:
            repo = factory()
            self._repos[key] = repo
        return repo

    @property
    def clients(self) -> ClientRepo:
        return self._repo(ClientRepo, lambda: ClientRepo(self.db))

    @property
    def users(self) -> UserRepo:
        return self._repo(UserRepo, lambda: UserRepo(self.db))

    @property
    def roles(self) -> RoleRepo:
        return self._repo(RoleRepo, lambda: RoleRepo(self.db))

    @property
    def job_times(self) -> JobTimeRepo:
        return self._repo(JobTimeRepo, lambda: JobTimeRepo(self.db))

    @property
    def incidents(self) -> IncidentRepo:
        return self._repo(IncidentRepo, lambda: IncidentRepo(self.db))

    @property
    def documents(self) -> DocumentRepo:
        return self._repo(DocumentRepo, lambda: DocumentRepo(self.db))

    def repository(self, model: type[M]) -> BaseRepo[M]:
        """Generic repository for any mapped model."""
        return self._repo(model, lambda: BaseRepo(self.db, model))

    def save_changes(self) -> int:
        """Commit pending work; returns how many objects were written."""
        changed = len(self.db.new) + len(self.db.dirty) + len(self.db.deleted)
        self.db.commit()
        return changed

    def begin(self) -> None:
        if not self.db.in_transaction():
            self.db.begin()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def run_in_transaction(self, fn: Callable[[UnitOfWork], T]) -> T:
        """Run ``fn`` and commit; roll back and re-raise on any failure."""
        self.begin()
        try:
            result = fn(self)
            self.db.commit()
            return result
        except Exception:
            self.db.rollback()
            raise

    def close(self) -> None:
        self.db.close()


__all__ = ["UnitOfWork"]
