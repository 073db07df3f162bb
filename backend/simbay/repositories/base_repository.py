# backend/simbay/repositories/base_repository.py
"""
Base Repository for SimBay

Repositories flush but never commit or roll back: the owning service's
``transaction()`` block decides the boundary and undoes partial work.
Every SQLAlchemy failure leaves here as a RepositoryException with the
original error chained, so callers can still see which constraint fired.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Primary-key access shared by every SimBay table.

    Attributes:
        db: Request-scoped session owned by the service layer
        model: Mapped class this repository serves
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def _name(self) -> str:
        return self.model.__name__

    def get_by_id(self, id: Any, load_relationships: bool = True) -> Optional[T]:
        """Row with primary key ``id``, or None. Relationships load eagerly on request."""
        query = self._build_query().filter(self.model.id == id)
        if load_relationships:
            query = self._apply_eager_loading(query)
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading {self._name} {id}: {str(e)}")
            raise RepositoryException(f"Failed to load {self._name}: {str(e)}") from e

    def create(self, **kwargs: Any) -> T:
        """
        Add a row and flush so generated ids and defaults are populated.

        Constraint violations surface at the flush; the IntegrityError is
        kept as ``__cause__``.
        """
        entity = self.model(**kwargs)
        try:
            self.db.add(entity)
            self.db.flush()
        except IntegrityError as exc:
            self.logger.warning("Constraint rejected new %s: %s", self._name, exc.orig)
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self._name}: {str(e)}")
            raise RepositoryException(f"Failed to create {self._name}: {str(e)}") from e
        return entity

    def delete(self, id: Any) -> bool:
        """Delete by primary key. False when no such row exists."""
        entity = self.get_by_id(id, load_relationships=False)
        if entity is None:
            return False
        try:
            self.db.delete(entity)
            self.db.flush()
        except IntegrityError as e:
            self.logger.error(f"{self._name} {id} is still referenced: {str(e)}")
            raise RepositoryException(f"Cannot delete due to existing references: {str(e)}") from e
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self._name} {id}: {str(e)}")
            raise RepositoryException(f"Failed to delete {self._name}: {str(e)}") from e
        return True

    # Helpers for subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """Override to join the relationships a listing always renders."""
        return query

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"{self._name} query failed: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}") from e

    def _execute_scalar(self, query: Query) -> Any:
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self.logger.error(f"{self._name} scalar query failed: {str(e)}")
            raise RepositoryException(f"Scalar query failed: {str(e)}") from e
