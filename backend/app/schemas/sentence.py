"""
SentenceBoard Backend - Sentence Request/Response Schemas
===========================================================

What:  Pydantic models defining the /api/sentences contract.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and generates the OpenAPI docs from them.

`text` and `category` are optional in the body: an absent or blank text is
answered with 400 by SentenceService rather than 422 by FastAPI.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SentenceWrite(BaseModel):
    """
    Body of POST /api/sentences and PUT /api/sentences/{id}.

    Any author field a client sends is ignored: the author is always the
    account bound to the session.
    """
    text: Optional[str] = Field(default=None, description="Message text (trimmed, max 500 chars)")
    category: Optional[str] = Field(
        default=None,
        description="thoughts, quotes, stories, jokes, questions, facts or other",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SentenceResponse(BaseModel):
    id: uuid.UUID = Field(description="Unique sentence identifier (UUID)")
    text: str = Field(description="Message text")
    author_name: str = Field(description="Author's username at the time of posting")
    category: str = Field(description="Message category")
    created_at: datetime = Field(description="When the sentence was created (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class SentenceUpdateResponse(BaseModel):
    """Returned by PUT /api/sentences/{id}."""
    message: str = Field(default="Message updated successfully")
    sentence: SentenceResponse


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. after DELETE."""
    message: str
