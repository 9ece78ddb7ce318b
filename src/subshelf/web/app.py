"""FastAPI web application exposing the episode and rename cores"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from subshelf.config import settings
from subshelf.errors import RelationParseError, ValidationError
from subshelf.relations import RelationTable, fetch_relations
from subshelf.rename import compile_rule, plan_from_preview, preview
from subshelf.schemas import (
    ClassifyRequest,
    PreviewRowResponse,
    ProgressReportResponse,
    RelationDatesResponse,
    RelationsResponse,
    RenameEntry,
    RenamePreviewRequest,
    RenamePreviewResponse,
    ValidationErrorResponse,
)
from subshelf.services.progress import classify

# Configure logging
logging.basicConfig(level=settings.log_level)
log = logging.getLogger(f'{settings.log_prefix}.web')


async def load_relations() -> RelationTable:
    """Load the upstream rule file, an empty table if it cannot be loaded"""
    try:
        return await fetch_relations(settings.relations_url)
    except httpx.HTTPError as e:
        log.error('Failed to download relations from %s: %s', settings.relations_url, e)
    except RelationParseError as e:
        log.error('Failed to parse relations: %s', e)
    return RelationTable()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan."""
    app.state.relations = await load_relations()
    yield


app = FastAPI(title='Subshelf', lifespan=lifespan)
api_router = APIRouter()

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


def get_relations(request: Request) -> RelationTable:
    """Relation table loaded at startup"""
    table = getattr(request.app.state, 'relations', None)
    return table if table is not None else RelationTable()


Relations = Annotated[RelationTable, Depends(get_relations)]


@api_router.get('/anime-relations', response_model=RelationsResponse)
async def get_anime_relations(table: Relations) -> RelationsResponse:
    """Full relation table."""
    return RelationsResponse.from_table(table)


@api_router.get('/anime-relations/date', response_model=RelationDatesResponse)
async def get_anime_relations_date(table: Relations) -> RelationDatesResponse:
    """Dates used by clients to validate their cached table."""
    return RelationDatesResponse(last_modified=table.last_modified, created_at=table.created_at)


@api_router.post(
    '/api/rename/preview',
    response_model=RenamePreviewResponse,
    responses={422: {'model': ValidationErrorResponse}},
)
async def rename_preview(body: RenamePreviewRequest) -> RenamePreviewResponse:
    """Preview a batch rename of the selected files."""
    try:
        rule = compile_rule(
            body.search,
            is_regex=body.is_regex,
            case_sensitive=body.case_sensitive,
            match_all=body.match_all,
            replacement=body.replacement,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422, detail=ValidationErrorResponse(field=e.field, message=e.message).model_dump()
        ) from e

    rows = preview(rule, body.files, body.scope, body.case_transform)
    return RenamePreviewResponse(
        rows=[PreviewRowResponse.from_row(r) for r in rows],
        plan=[RenameEntry.from_entry(e) for e in plan_from_preview(rows)],
    )


@api_router.post('/api/progress/classify', response_model=ProgressReportResponse)
async def classify_progress(body: ClassifyRequest, table: Relations) -> ProgressReportResponse:
    """Split the files of an entry into new and already watched ones."""
    report = classify(
        [f.to_ref() for f in body.files],
        body.progress.to_state(),
        body.series_id,
        table,
    )
    return ProgressReportResponse.from_report(report)


app.include_router(api_router)
