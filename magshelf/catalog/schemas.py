"""
Pydantic schema definitions for the catalog module.

``ItemRecord`` is what lives in the JSON data file. ``Item`` is what the
API returns: the record plus the asset URLs derived from its id. Paths are
never persisted, so a record cannot drift away from the files it owns.
Field names are snake_case in Python and camelCase on the wire.
"""

import json
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemType(str, Enum):
    """The two collections sharing the same CRUD shape."""

    MAGAZINES = "magazines"
    EWC = "ewc"


class ItemRecord(BaseModel):
    """A single catalog entry as persisted in ``entries.json``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    publish_date: str = Field(default="", alias="publishDate")
    authors: List[str] = Field(default_factory=list)
    type: ItemType


class Item(ItemRecord):
    """An item with its derived asset URLs.

    ``thumbnail_path`` is ``None`` when no cover image was uploaded; the
    browser then renders page 1 of the PDF instead.
    """

    pdf_path: str = Field(alias="pdfPath")
    thumbnail_path: Optional[str] = Field(default=None, alias="thumbnailPath")


class ItemUpdate(BaseModel):
    """Body of ``PUT {base}/{id}``. Omitted fields keep their values."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    publish_date: Optional[str] = Field(default=None, alias="publishDate")
    # A list, or the JSON-encoded list a multipart client would send.
    authors: Optional[List[str]] = None

    @field_validator("authors", mode="before")
    @classmethod
    def _decode_authors(cls, value):
        if isinstance(value, str):
            return json.loads(value)
        return value


class ThumbnailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Thumbnail updated"
    thumbnail_path: str = Field(alias="thumbnailPath")


class BackfillResponse(BaseModel):
    updated: List[str] = Field(default_factory=list)
