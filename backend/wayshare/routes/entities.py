"""
WayShare Backend - Entity Route Handlers
=========================================

What:  REST endpoints for every entity, generated from its EntityDefinition.
How:   build_entity_router() returns an APIRouter mounted at /api/<path>.
       Handlers stay thin: guard the identity invariants, delegate to the
       entity's CrudService, set status codes and alert headers.

Route Inventory (per entity, e.g. /api/rides):
    POST   /api/rides          201 + Location, 400 if the body has an id
    PUT    /api/rides/{id}     200, 400 if body id null / mismatched / unknown
    PATCH  /api/rides/{id}     200, 400 if body id null / mismatched / unknown,
                               404 if the record vanishes before the merge
    GET    /api/rides          200 + X-Total-Count (+ Link when paginated)
    GET    /api/rides/{id}     200, 404 if unknown
    DELETE /api/rides/{id}     204 always

    Keys in paths and in ?memberId are bounded to BIGINT; larger values are
    rejected as validation errors (400).

Handlers share no mutable state; every request is independent.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from wayshare.config import settings
from wayshare.database import get_db_session
from wayshare.entities import EntityDefinition
from wayshare.exceptions import IdMismatchError, InvalidRequestError, MissingIdError, NotFoundError
from wayshare.pagination import PageRequest, pagination_headers, parse_sort
from wayshare.routes.headers import (
    entity_creation_alert,
    entity_deletion_alert,
    entity_update_alert,
)
from wayshare.schemas.common import MAX_ID, ErrorResponse

logger = logging.getLogger(__name__)

MERGE_PATCH_MEDIA_TYPES = ("application/json", "application/merge-patch+json")

RecordId = Annotated[int, Path(le=MAX_ID, description="Record key")]

# Largest page whose offset still fits a BIGINT
MAX_PAGE = MAX_ID // settings.max_page_size


def build_entity_router(entity: EntityDefinition) -> APIRouter:
    """
    Create the CRUD router for one entity type.

    Args:
        entity: the definition binding DTOs, service and REST path together

    Returns:
        APIRouter with the six endpoints listed in the module docstring.
    """
    router = APIRouter(prefix=f"/api/{entity.path}", tags=[entity.title])
    service = entity.service
    dto_class = entity.dto
    patch_class = entity.patch_dto
    name = entity.name
    title = entity.title

    def check_ids(record_id: int, body_id: Optional[int]) -> None:
        if body_id is None:
            raise MissingIdError(entity_name=name)
        if body_id != record_id:
            raise IdMismatchError(entity_name=name, path_id=record_id, body_id=body_id)

    # ── CREATE ────────────────────────────────────────────────────────────

    @router.post(
        "",
        status_code=201,
        response_model=dto_class,
        responses={400: {"description": "Body carries an id or is invalid", "model": ErrorResponse}},
        summary=f"Create a new {title}",
    )
    async def create_entity(
        response: Response,
        payload: dto_class = Body(...),
        db: AsyncSession = Depends(get_db_session),
    ):
        logger.debug("REST request to save %s : %s", title, payload)
        if payload.id is not None:
            raise InvalidRequestError(
                message=f"A new {name} cannot already have an ID",
                entity_name=name,
                error_key="idexists",
            )
        created = await service.save(db, payload)
        response.headers["Location"] = f"/api/{entity.path}/{created.id}"
        response.headers.update(entity_creation_alert(name, created.id))
        return created

    # ── UPDATE (full) ─────────────────────────────────────────────────────

    @router.put(
        "/{record_id}",
        response_model=dto_class,
        responses={400: {"description": "Missing, mismatched or unknown id", "model": ErrorResponse}},
        summary=f"Update an existing {title}",
    )
    async def update_entity(
        record_id: RecordId,
        response: Response,
        payload: dto_class = Body(...),
        db: AsyncSession = Depends(get_db_session),
    ):
        logger.debug("REST request to update %s : %s, %s", title, record_id, payload)
        check_ids(record_id, payload.id)
        if not await service.exists(db, record_id):
            raise NotFoundError(entity_name=name, resource_id=record_id, status_code=400)
        updated = await service.update(db, payload)
        response.headers.update(entity_update_alert(name, updated.id))
        return updated

    # ── PARTIAL UPDATE ────────────────────────────────────────────────────

    @router.patch(
        "/{record_id}",
        response_model=dto_class,
        responses={
            400: {"description": "Missing, mismatched or unknown id", "model": ErrorResponse},
            404: {"description": f"{title} not found", "model": ErrorResponse},
        },
        summary=f"Partially update an existing {title}",
        description=(
            "Merge-patch semantics: only non-null fields of the body are applied. "
            f"Accepts {' and '.join(MERGE_PATCH_MEDIA_TYPES)}."
        ),
    )
    async def partial_update_entity(
        record_id: RecordId,
        response: Response,
        payload: patch_class = Body(..., media_type="application/merge-patch+json"),
        db: AsyncSession = Depends(get_db_session),
    ):
        logger.debug("REST request to partial update %s partially : %s, %s", title, record_id, payload)
        check_ids(record_id, payload.id)
        if not await service.exists(db, record_id):
            raise NotFoundError(entity_name=name, resource_id=record_id, status_code=400)
        result = await service.partial_update(db, payload)
        if result is None:
            raise NotFoundError(entity_name=name, resource_id=record_id)
        response.headers.update(entity_update_alert(name, result.id))
        return result

    # ── READ (collection) ─────────────────────────────────────────────────

    async def list_page(request: Request, response: Response, db: AsyncSession, page_request, owner_id):
        page = await service.find_all(db, page_request=page_request, owner_id=owner_id)
        response.headers.update(pagination_headers(request.url, page))
        return page.items

    def sort_orders(sort: Optional[List[str]]):
        try:
            return parse_sort(sort)
        except ValueError as e:
            raise InvalidRequestError(message=str(e), entity_name=name, error_key="sortinvalid")

    owner_query = Query(
        default=None,
        le=MAX_ID,
        alias="memberId",
        description=f"Only {title} records owned by this member",
        include_in_schema=entity.owned,
    )

    if entity.paginated:
        @router.get(
            "",
            response_model=List[dto_class],
            summary=f"Get a page of {title} records",
            description="Infinite-scroll pagination: request successive pages and append them.",
        )
        async def get_entity_page(
            request: Request,
            response: Response,
            page: int = Query(default=0, ge=0, le=MAX_PAGE, description="Zero-based page index"),
            size: Optional[int] = Query(default=None, ge=1, le=settings.max_page_size),
            sort: Optional[List[str]] = Query(default=None, description="field,asc|desc"),
            member_id: Optional[int] = owner_query,
            db: AsyncSession = Depends(get_db_session),
        ):
            logger.debug("REST request to get a page of %s", title)
            page_request = PageRequest(
                page=page,
                size=size or settings.default_page_size,
                sort=sort_orders(sort),
            )
            return await list_page(request, response, db, page_request, member_id)
    else:
        @router.get(
            "",
            response_model=List[dto_class],
            summary=f"Get all {title} records",
        )
        async def get_all_entities(
            request: Request,
            response: Response,
            sort: Optional[List[str]] = Query(default=None, description="field,asc|desc"),
            member_id: Optional[int] = owner_query,
            db: AsyncSession = Depends(get_db_session),
        ):
            logger.debug("REST request to get all %s", title)
            page_request = PageRequest(sort=sort_orders(sort))
            return await list_page(request, response, db, page_request, member_id)

    # ── READ (single) ─────────────────────────────────────────────────────

    @router.get(
        "/{record_id}",
        response_model=dto_class,
        responses={404: {"description": f"{title} not found", "model": ErrorResponse}},
        summary=f"Get one {title}",
    )
    async def get_entity(record_id: RecordId, db: AsyncSession = Depends(get_db_session)):
        logger.debug("REST request to get %s : %s", title, record_id)
        found = await service.find_one(db, record_id)
        if found is None:
            raise NotFoundError(entity_name=name, resource_id=record_id)
        return found

    # ── DELETE ────────────────────────────────────────────────────────────

    @router.delete(
        "/{record_id}",
        status_code=204,
        response_class=Response,
        summary=f"Delete a {title}",
        description="Idempotent: deleting an unknown id also answers 204.",
    )
    async def delete_entity(record_id: RecordId, db: AsyncSession = Depends(get_db_session)):
        logger.debug("REST request to delete %s : %s", title, record_id)
        await service.delete(db, record_id)
        return Response(status_code=204, headers=entity_deletion_alert(name, record_id))

    return router
