from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class HealthStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str


class BookDetails(BaseModel):
    """
    The simplified book record served by /details/{id}.
    Every field is optional so empty values drop out of the JSON body.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    author: Optional[str] = None
    year: Optional[str] = None  # kept as a string, e.g. "1595" or "2002-05-01"
    type: Optional[str] = None
    pages: Optional[int] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    isbn_10: Optional[str] = Field(default=None, alias="ISBN-10")
    isbn_13: Optional[str] = Field(default=None, alias="ISBN-13")


# --- Google Books volumes search (consumed only) ---

class IndustryIdentifier(BaseModel):
    type: Optional[str] = None  # "ISBN_10", "ISBN_13", "OTHER", ...
    identifier: Optional[str] = None


class VolumeInfo(BaseModel):
    title: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    publisher: Optional[str] = None
    publishedDate: Optional[str] = None
    description: Optional[str] = None
    industryIdentifiers: List[IndustryIdentifier] = Field(default_factory=list)
    pageCount: Optional[int] = None
    printType: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    maturityRating: Optional[str] = None
    language: Optional[str] = None
    previewLink: Optional[str] = None
    infoLink: Optional[str] = None
    canonicalVolumeLink: Optional[str] = None


class Volume(BaseModel):
    kind: Optional[str] = None
    id: Optional[str] = None
    etag: Optional[str] = None
    selfLink: Optional[str] = None
    volumeInfo: VolumeInfo = Field(default_factory=VolumeInfo)
    saleInfo: Optional[dict] = None
    accessInfo: Optional[dict] = None


class VolumeSearchResult(BaseModel):
    """
    Response of GET /books/v1/volumes. Only items[0] is ever used.
    """
    kind: Optional[str] = None
    totalItems: int = 0
    items: List[Volume] = Field(default_factory=list)
