"""
WayShare Backend - Generic CRUD Service
========================================

What:  Create / update / partial-update / delete / find for any entity.
How:   Parametrized by an EntityMapper (record class, DTO class, field set)
       plus the entity name and, optionally, the owner column used to
       restrict listings to one member's records.
Who:   Called by the entity route handlers; one instance per entity type,
       built in wayshare.entities.

Transaction Model:
    Services receive the request's AsyncSession and only flush. The
    get_db_session() dependency commits after the handler returns, so each
    service call is one storage transaction. No locking and no version
    check: concurrent writers to the same row are last-write-wins.

Error Translation:
    IntegrityError (unique / foreign key) → ValidationError("constraintviolation")
    Any other SQLAlchemyError             → DatabaseError (details logged only)
"""

import logging
from typing import Any, Optional

from sqlalchemy import asc, delete as sa_delete, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wayshare.exceptions import (
    DatabaseError,
    InvalidRequestError,
    MissingIdError,
    NotFoundError,
    ValidationError,
)
from wayshare.pagination import DESC, Page, PageRequest
from wayshare.schemas.common import EntityDTO
from wayshare.services.mapper import EntityMapper

logger = logging.getLogger(__name__)


class CrudService:
    """
    Stateless service for one entity type.

    Responsibilities:
        - save():           insert a new record, key assigned by storage
        - update():         overwrite every mapped field of an existing record
        - partial_update(): merge non-null fields into an existing record
        - find_all():       ordered, optionally sorted / paged / owner-filtered
        - find_one():       zero-or-one lookup
        - delete():         idempotent removal
    """

    def __init__(
        self,
        entity_name: str,
        mapper: EntityMapper,
        owner_attribute: Optional[str] = None,
    ):
        self.entity_name = entity_name
        self.mapper = mapper
        self.model = mapper.record_class
        self.owner_attribute = owner_attribute

    # ══════════════════════════════════════════════════════════════════════
    # Writes
    # ══════════════════════════════════════════════════════════════════════

    async def save(self, db: AsyncSession, dto: EntityDTO) -> EntityDTO:
        """
        Persist a new record.

        Raises:
            InvalidRequestError: dto.id is set (nothing is written)
            ValidationError: a unique or foreign-key constraint rejected the row
        """
        logger.debug("Request to save %s : %s", self.entity_name, dto)
        if dto.id is not None:
            raise InvalidRequestError(
                message=f"A new {self.entity_name} cannot already have an ID",
                entity_name=self.entity_name,
                error_key="idexists",
            )
        record = self.mapper.to_record(dto)
        db.add(record)
        await self._flush(db, record)
        return self.mapper.to_transfer(record)

    async def update(self, db: AsyncSession, dto: EntityDTO) -> EntityDTO:
        """
        Overwrite every mapped field of an existing record.

        Raises:
            MissingIdError: dto.id is null
            NotFoundError: no record with that id
        """
        logger.debug("Request to update %s : %s", self.entity_name, dto)
        if dto.id is None:
            raise MissingIdError(entity_name=self.entity_name)
        record = await self._get(db, dto.id)
        if record is None:
            raise NotFoundError(entity_name=self.entity_name, resource_id=dto.id)

        replacement = self.mapper.to_record(dto)
        for attribute, value in self.mapper.snapshot(replacement).items():
            if attribute != "id":
                setattr(record, attribute, value)
        await self._flush(db, record)
        return self.mapper.to_transfer(record)

    async def partial_update(self, db: AsyncSession, dto: EntityDTO) -> Optional[EntityDTO]:
        """
        Merge the non-null fields of `dto` into an existing record.

        Returns:
            None when no record has dto.id ("missing"); otherwise the
            persisted projection, also when zero fields changed ("no-op").

        Raises:
            MissingIdError: dto.id is null
        """
        logger.debug("Request to partially update %s : %s", self.entity_name, dto)
        if dto.id is None:
            raise MissingIdError(entity_name=self.entity_name)
        record = await self._get(db, dto.id)
        if record is None:
            return None

        before = self.mapper.snapshot(record)
        self.mapper.apply_non_null_fields(dto, record)
        changed = [k for k, v in self.mapper.snapshot(record).items() if before[k] != v]
        if not changed:
            logger.debug("Partial update of %s %s changed no fields", self.entity_name, dto.id)
            return self.mapper.to_transfer(record)

        await self._flush(db, record)
        logger.debug("Partial update of %s %s changed %s", self.entity_name, dto.id, changed)
        return self.mapper.to_transfer(record)

    async def delete(self, db: AsyncSession, record_id: int) -> None:
        """Delete by key. A missing key is not an error."""
        logger.debug("Request to delete %s : %s", self.entity_name, record_id)
        try:
            await db.execute(sa_delete(self.model).where(self.model.id == record_id))
            await db.flush()
        except IntegrityError as e:
            raise self._constraint_violation(e)
        except SQLAlchemyError as e:
            raise self._database_error("delete", e)

    # ══════════════════════════════════════════════════════════════════════
    # Reads
    # ══════════════════════════════════════════════════════════════════════

    async def find_all(
        self,
        db: AsyncSession,
        page_request: Optional[PageRequest] = None,
        owner_id: Optional[int] = None,
    ) -> Page:
        """
        Ordered listing.

        Args:
            page_request: sort orders and optional page window; sort fields
                are wire names (see EntityMapper.sort_attribute). Ties and
                unsorted listings are ordered by id ascending.
            owner_id: restrict to records owned by this member. Ignored for
                entities without an owner column.

        Raises:
            InvalidRequestError: a sort field does not exist on the entity
        """
        logger.debug("Request to get all %s (%s, owner=%s)", self.entity_name, page_request, owner_id)
        page_request = page_request or PageRequest()

        query = select(self.model)
        count_query = select(func.count()).select_from(self.model)
        if owner_id is not None and self.owner_attribute:
            owner_column = getattr(self.model, self.owner_attribute)
            query = query.where(owner_column == owner_id)
            count_query = count_query.where(owner_column == owner_id)

        ordering = []
        for order in page_request.sort:
            attribute = self.mapper.sort_attribute(order.field)
            if attribute is None:
                raise InvalidRequestError(
                    message=f"Cannot sort {self.entity_name} by '{order.field}'",
                    entity_name=self.entity_name,
                    error_key="sortinvalid",
                    context={"sort": order.field},
                )
            column = getattr(self.model, attribute)
            ordering.append(desc(column) if order.direction == DESC else asc(column))
        ordering.append(asc(self.model.id))
        query = query.order_by(*ordering)

        if page_request.is_paged:
            query = query.offset(page_request.offset).limit(page_request.size)

        try:
            result = await db.execute(query)
            records = list(result.scalars().all())
            if page_request.is_paged:
                total = (await db.execute(count_query)).scalar() or 0
            else:
                total = len(records)
        except SQLAlchemyError as e:
            raise self._database_error("list", e)

        return Page(
            items=[self.mapper.to_transfer(r) for r in records],
            total=total,
            request=page_request,
        )

    async def find_one(self, db: AsyncSession, record_id: int) -> Optional[EntityDTO]:
        logger.debug("Request to get %s : %s", self.entity_name, record_id)
        record = await self._get(db, record_id)
        return self.mapper.to_transfer(record) if record is not None else None

    async def exists(self, db: AsyncSession, record_id: int) -> bool:
        try:
            result = await db.execute(select(self.model.id).where(self.model.id == record_id))
        except SQLAlchemyError as e:
            raise self._database_error("lookup", e)
        return result.scalar_one_or_none() is not None

    # ══════════════════════════════════════════════════════════════════════
    # Internals
    # ══════════════════════════════════════════════════════════════════════

    async def _get(self, db: AsyncSession, record_id: Any):
        try:
            result = await db.execute(select(self.model).where(self.model.id == record_id))
        except SQLAlchemyError as e:
            raise self._database_error("lookup", e)
        return result.scalar_one_or_none()

    async def _flush(self, db: AsyncSession, record) -> None:
        """Flush, then reload the row so the projection reflects what was stored."""
        try:
            await db.flush()
            await db.refresh(record)
        except IntegrityError as e:
            raise self._constraint_violation(e)
        except SQLAlchemyError as e:
            raise self._database_error("write", e)

    def _constraint_violation(self, error: IntegrityError) -> ValidationError:
        logger.warning("Constraint violation on %s: %s", self.entity_name, error.orig)
        return ValidationError(
            message=f"The {self.entity_name} violates a storage constraint",
            entity_name=self.entity_name,
            error_key="constraintviolation",
        )

    def _database_error(self, operation: str, error: SQLAlchemyError) -> DatabaseError:
        logger.error(
            "Database error during %s of %s: %s", operation, self.entity_name, error, exc_info=True
        )
        return DatabaseError(
            message=f"Could not {operation} {self.entity_name}. Please try again.",
            context={"entity": self.entity_name, "error_type": type(error).__name__},
        )
