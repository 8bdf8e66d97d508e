"""
Todo Cards Backend — Card Request/Response Schemas
====================================================

What:  API contract for creating, updating and listing cards.
How:   Timestamps travel as "YYYY-MM-DD HH:MM:SS" strings (see
       app.timestamps); null means "not set".
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class CardCreateRequest(BaseModel):
    """Body of POST /card. The author is the logged-in user."""
    title: str = Field(default="", max_length=255)
    content: str = Field(default="")
    marked: Optional[str] = Field(
        default=None,
        description="Completion time 'YYYY-MM-DD HH:MM:SS'; omit for an open card",
    )
    author_id: Optional[int] = Field(
        default=None,
        description="Optional; must equal the logged-in user when given",
    )


class CardUpdateRequest(BaseModel):
    """Body of PUT /card."""
    activities_no: str = Field(default="", description="Card number, e.g. AC-0001")
    title: str = Field(default="", max_length=255)
    content: str = Field(default="")
    marked: Optional[str] = Field(
        default=None,
        description="Completion time 'YYYY-MM-DD HH:MM:SS'; empty keeps the card open",
    )
    marked_status: Optional[str] = Field(default=None, max_length=50)
    author_id: Optional[int] = Field(
        default=None,
        description="Optional; must equal the logged-in user when given",
    )


class CardResponse(BaseModel):
    activities_no: str
    title: str
    content: str
    author_id: int
    marked: Optional[str] = None
    marked_status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None


class CardListResponse(BaseModel):
    """
    Page of cards for GET /card.

    `next` / `prev` are URLs of the neighbouring pages, null at either end.
    """
    next: Optional[str] = Field(default=None, description="URL of the next page")
    prev: Optional[str] = Field(default=None, description="URL of the previous page")
    total: int = Field(description="Number of cards matching the filter")
    data: List[CardResponse] = Field(default_factory=list)
