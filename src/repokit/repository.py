"""Generic repository over a (model, entity) pair."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, Optional, TypeVar

import structlog
from sqlalchemy import Select, func, inspect, select
from sqlalchemy.orm import Session, selectinload

from repokit.config import get_settings
from repokit.errors import RepositoryError
from repokit.models.conversion import Converter, ModelConverter
from repokit.pagination import (
    PageConfig,
    PageResult,
    effective_page_size,
    page_count,
    page_offset,
    should_count,
)
from repokit.specification import Specification, apply_specifications, by_example
from repokit.utils import chunk_sequence, map_sequence

logger = structlog.get_logger(__name__)

M = TypeVar("M")
E = TypeVar("E")

_ALL_RELATIONSHIPS = "*"


class GenericRepository(Generic[M, E]):
    """
    CRUD and query operations for one SQLAlchemy model, returning entities.

    Models are converted to entities (and back) through ``converter``, by
    default the model's own ``to_entity`` / ``from_entity``. Subclasses can
    pin the model as a class attribute::

        class UserRepository(GenericRepository[UserModel, User]):
            model = UserModel

    Writes are flushed, never committed; the session owner decides about the
    transaction. Errors from SQLAlchemy propagate unchanged.
    """

    model: type[M]
    order_by: tuple = ()

    def __init__(
        self,
        session: Session,
        model: Optional[type[M]] = None,
        converter: Optional[Converter[M, E]] = None,
    ):
        """Initialize repository with database session."""
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise TypeError(f"{type(self).__name__} needs a model class")
        self.session = session
        self.converter: Converter[M, E] = (
            converter if converter is not None else ModelConverter(self.model)
        )

    # -- writes ----------------------------------------------------------------

    def insert(self, entity: E) -> E:
        """Insert an entity; the result carries DB-assigned values such as the id."""
        model = self.converter.to_model(entity)
        self.session.add(model)
        self.session.flush()
        logger.debug("Inserted row", model=self.model.__name__)
        return self.converter.to_entity(model)

    def insert_direct(self, model: M) -> M:
        """Insert a model instance as is."""
        self.session.add(model)
        self.session.flush()
        return model

    def insert_from_interface(self, data: Mapping[str, Any] | Any) -> Any:
        """
        Insert arbitrary payload: a mapping of column values for this model, or
        any mapped instance.
        """
        obj = self.model(**data) if isinstance(data, Mapping) else data
        self.session.add(obj)
        self.session.flush()
        return obj

    def insert_many(self, entities: Iterable[E], chunk_size: Optional[int] = None) -> list[E]:
        """Insert entities in chunks, flushing once per chunk."""
        size = chunk_size if chunk_size is not None else get_settings().repository.batch_size
        inserted: list[E] = []
        for chunk in chunk_sequence(list(entities), size):
            models = [self.converter.to_model(e) for e in chunk]
            self.session.add_all(models)
            self.session.flush()
            inserted.extend(self.from_model_to_dto(models))
        logger.debug("Inserted rows", model=self.model.__name__, count=len(inserted), chunk_size=size)
        return inserted

    def update(self, entity: E) -> E:
        """Save an entity: update the row with its primary key, insert it if absent."""
        model = self.session.merge(self.converter.to_model(entity))
        self.session.flush()
        return self.converter.to_entity(model)

    def update_direct(self, model: M) -> M:
        """Save a model instance; returns the persistent instance."""
        merged = self.session.merge(model)
        self.session.flush()
        return merged

    def delete(self, entity: E) -> bool:
        """Delete the row with the entity's primary key. False if there is none."""
        model = self.converter.to_model(entity)
        identity = inspect(self.model).primary_key_from_instance(model)
        if any(value is None for value in identity):
            raise RepositoryError(f"Cannot delete {self.model.__name__} without a primary key")
        return self.delete_by_id(identity[0] if len(identity) == 1 else tuple(identity))

    def delete_by_id(self, id: Any) -> bool:
        """Delete by primary key. False if no such row."""
        model = self.session.get(self.model, id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.flush()
        logger.debug("Deleted row", model=self.model.__name__, id=id)
        return True

    # -- lookups ---------------------------------------------------------------

    def find_by_id(self, id: Any) -> E:
        """Get by primary key. Raises ``NoResultFound`` if missing."""
        return self.converter.to_entity(self.session.get_one(self.model, id))

    def find_by_id_with_options(self, id: Any, eager_load: bool) -> E:
        """Get by primary key, loading every relationship up front when ``eager_load``."""
        options = [selectinload(_ALL_RELATIONSHIPS)] if eager_load else []
        return self.converter.to_entity(self.session.get_one(self.model, id, options=options))

    def find_by_model(self, example: M) -> M:
        """
        First model equal to ``example`` on the columns set on it, with its
        relationships loaded. Raises ``NoResultFound`` if none matches.
        """
        stmt = (
            self._select([by_example(example)])
            .options(selectinload(_ALL_RELATIONSHIPS))
            .limit(1)
        )
        return self.session.scalars(stmt).one()

    def find_by_model_multi(self, example: M) -> list[M]:
        """All models equal to ``example`` on the columns set on it."""
        return list(self.session.scalars(self._select([by_example(example)])).all())

    def find_by_entity(self, entity: E) -> list[E]:
        """
        Entities matching the non-``None`` fields of ``entity``.

        Every other field is an equality filter, defaults included: with an
        entity whose ``age`` defaults to 0, only rows with age 0 match. Partial
        examples need ``Optional`` entity fields left at ``None``; otherwise
        filter with ``FieldSpecification``.
        """
        return self.find_by_entity_with_options(entity, eager_load=False)

    def find_by_entity_with_options(self, entity: E, eager_load: bool) -> list[E]:
        """Same as ``find_by_entity``, loading every relationship when ``eager_load``."""
        example = entity if isinstance(entity, self.model) else self.converter.to_model(entity)
        stmt = self._select([by_example(example, skip_none=True)])
        if eager_load:
            stmt = stmt.options(selectinload(_ALL_RELATIONSHIPS))
        return self.from_model_to_dto(self.session.scalars(stmt).all())

    # -- specification queries -------------------------------------------------

    def find(self, *specifications: Specification) -> list[E]:
        return self.find_with_limit(-1, -1, *specifications)

    def find_paged(self, *specifications: Specification) -> list[E]:
        """Same as ``find``; use ``find_paged_with_limit`` for an actual page."""
        return self.find_with_limit(-1, -1, *specifications)

    def find_all(self) -> list[E]:
        return self.find_with_limit(-1, -1)

    def find_with_limit(self, limit: int, offset: int, *specifications: Specification) -> list[E]:
        """Filtered entities; a negative ``limit`` or ``offset`` means none."""
        stmt = self._select(specifications)
        if limit >= 0:
            stmt = stmt.limit(limit)
        if offset > 0:
            stmt = stmt.offset(offset)
        return self.from_model_to_dto(self.session.scalars(stmt).all())

    def count(self, *specifications: Specification) -> int:
        stmt = apply_specifications(select(func.count()).select_from(self.model), specifications)
        return self.session.scalar(stmt) or 0

    def find_paged_with_limit(
        self, page_cfg: PageConfig, *specifications: Specification
    ) -> PageResult[E]:
        """
        One page of entities.

        The page size is clamped to at least 1. The number of pages is
        computed with the same specifications when ``page_cfg.force_count`` is
        set, or on page 0 unless ``page_cfg.ignore_count``; otherwise ``count``
        stays 0. The offset follows ``page_cfg.offset_mode``.
        """
        size = effective_page_size(page_cfg.size)
        result: PageResult[E] = PageResult(page=page_cfg.page)

        if should_count(page_cfg):
            result.count = page_count(self.count(*specifications), size)
            result.counted = True

        offset = page_offset(page_cfg)
        stmt = self._select(specifications).limit(size).offset(offset)
        result.data = self.from_model_to_dto(self.session.scalars(stmt).all())

        logger.debug(
            "Fetched page",
            model=self.model.__name__,
            page=page_cfg.page,
            size=size,
            offset=offset,
            pages=result.count,
            counted=result.counted,
        )
        return result

    # -- conversion ------------------------------------------------------------

    def from_model_to_dto(self, models: Sequence[M]) -> list[E]:
        """Convert models to entities. No I/O."""
        return map_sequence(models, self.converter.to_entity)

    # -- internals -------------------------------------------------------------

    def _select(self, specifications: Sequence[Specification]) -> Select:
        stmt = apply_specifications(select(self.model), specifications)
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        return stmt
