# magshelf/models.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class VerifyRequest(BaseModel):
    password: Optional[str] = None


class VerifyResponse(BaseModel):
    success: bool


class MessageResponse(BaseModel):
    message: str


class PageLayoutOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    width: int
    height: int
    mode: str = Field(description="'single' for narrow viewports, 'spread' otherwise")
    min_width: int = Field(alias="minWidth")
    max_width: int = Field(alias="maxWidth")
    min_height: int = Field(alias="minHeight")
    max_height: int = Field(alias="maxHeight")


class PageSlotOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot: int
    page_number: Optional[int] = Field(
        default=None,
        alias="pageNumber",
        description="PDF page number; None for the blank spacer before page 1.",
    )
    is_cover: bool = Field(default=False, alias="isCover")
    rendered: bool = False
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class ReaderState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    num_pages: int = Field(alias="numPages")
    current_slot: int = Field(alias="currentSlot")
    visible_slots: List[int] = Field(default_factory=list, alias="visibleSlots")
    layout: PageLayoutOut
    slots: List[PageSlotOut] = Field(default_factory=list)
