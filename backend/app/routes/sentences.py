"""
SentenceBoard Backend - Sentence Route Handlers
=================================================

What:  JSON CRUD API under /api/sentences.
How:   Extracts query/body/path values, resolves the caller through the
       authorization dependencies, delegates to SentenceService.

Access:
    GET     /api/sentences                 public
    POST    /api/sentences                 session
    GET     /api/sentences/users           public
    GET     /api/sentences/users/{name}    public
    GET     /api/sentences/{id}            public
    PUT     /api/sentences/{id}            session + owner
    DELETE  /api/sentences/{id}            session + owner

The /users routes are declared before /{sentence_id} so "users" is never
parsed as an id.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.account import Account
from app.permissions import require_account_api
from app.schemas.common import ErrorResponse
from app.schemas.sentence import (
    MessageResponse,
    SentenceResponse,
    SentenceUpdateResponse,
    SentenceWrite,
)
from app.services.sentence_service import parse_sentence_id, sentence_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sentences", tags=["Sentences"])

_AUTH_ERRORS = {
    401: {"description": "Not logged in", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[SentenceResponse],
    summary="List and search sentences",
)
async def list_sentences(
    category: Optional[str] = Query(default=None, description="Category filter ('all' = any)"),
    user: Optional[str] = Query(default=None, description="Author name filter ('all' = any)"),
    sort_by: Optional[str] = Query(
        default=None,
        alias="sortBy",
        description="newest (default), oldest, or name",
    ),
    search: Optional[str] = Query(
        default=None,
        description="Case-insensitive match on message text or author name",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[SentenceResponse]:
    sentences = await sentence_service.list_sentences(
        db,
        category=category,
        author=user,
        search=search,
        sort_by=sort_by,
    )
    return [SentenceResponse.model_validate(s) for s in sentences]


@router.post(
    "",
    response_model=SentenceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Empty or oversized text", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Create a sentence as the logged-in user",
)
async def create_sentence(
    body: Optional[SentenceWrite] = None,
    account: Account = Depends(require_account_api),
    db: AsyncSession = Depends(get_db_session),
) -> SentenceResponse:
    body = body or SentenceWrite()
    sentence = await sentence_service.create_sentence(
        db,
        text=body.text,
        category=body.category,
        author=account,
    )
    return SentenceResponse.model_validate(sentence)


@router.get(
    "/users",
    response_model=List[str],
    summary="Distinct author names, alphabetically",
)
async def list_authors(db: AsyncSession = Depends(get_db_session)) -> List[str]:
    return await sentence_service.list_distinct_authors(db)


@router.get(
    "/users/{name}",
    response_model=List[SentenceResponse],
    responses={404: {"description": "No sentences by this author", "model": ErrorResponse}},
    summary="All sentences by one author",
)
async def list_by_author(
    name: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[SentenceResponse]:
    sentences = await sentence_service.list_by_author(db, name)
    return [SentenceResponse.model_validate(s) for s in sentences]


@router.get(
    "/{sentence_id}",
    response_model=SentenceResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Sentence not found", "model": ErrorResponse},
    },
    summary="Get a single sentence",
)
async def get_sentence(
    sentence_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SentenceResponse:
    sentence = await sentence_service.get_sentence(db, parse_sentence_id(sentence_id))
    return SentenceResponse.model_validate(sentence)


@router.put(
    "/{sentence_id}",
    response_model=SentenceUpdateResponse,
    responses={
        400: {"description": "Empty text or malformed id", "model": ErrorResponse},
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Sentence not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Edit one of your sentences",
)
async def update_sentence(
    sentence_id: str,
    body: Optional[SentenceWrite] = None,
    account: Account = Depends(require_account_api),
    db: AsyncSession = Depends(get_db_session),
) -> SentenceUpdateResponse:
    body = body or SentenceWrite()
    sentence = await sentence_service.update_sentence(
        db,
        parse_sentence_id(sentence_id),
        text=body.text,
        category=body.category,
        account=account,
    )
    return SentenceUpdateResponse(
        message="Message updated successfully",
        sentence=SentenceResponse.model_validate(sentence),
    )


@router.delete(
    "/{sentence_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Sentence not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Delete one of your sentences",
)
async def delete_sentence(
    sentence_id: str,
    account: Account = Depends(require_account_api),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await sentence_service.delete_sentence(db, parse_sentence_id(sentence_id), account)
    return MessageResponse(message="Message deleted successfully")
