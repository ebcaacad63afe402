"""Product Schemas — admin create/update payloads and catalog responses.

Invariants:
    - title >= 2 chars (stripped); price finite and >= 0; stock >= 0
    - ProductUpdate distinguishes "not sent" from "sent": only fields in
      model_fields_set are applied
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    title: str = Field(min_length=2, max_length=200)
    price: float = Field(ge=0, allow_inf_nan=False)
    stock: int = Field(0, ge=0)
    category: str | None = Field(None, max_length=80)
    description: str = ""
    images: list[str] = Field(default_factory=list)
    active: bool = True

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Title is required (min 2 chars)")
        return v

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class ProductUpdate(BaseModel):
    title: str | None = Field(None, min_length=2, max_length=200)
    price: float | None = Field(None, ge=0, allow_inf_nan=False)
    stock: int | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=80)
    description: str | None = None
    images: list[str] | None = None
    active: bool | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Title must be at least 2 chars")
        return v

    def changes(self) -> dict:
        """Fields explicitly sent by the client (None values for non-nullable columns dropped)."""
        data = self.model_dump(include=self.model_fields_set)
        return {
            k: v for k, v in data.items()
            if v is not None or k == "category"
        }


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    slug: str
    description: str
    price: float
    stock: int
    category: str | None
    images: list[str]
    active: bool
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime


class ProductEnvelope(BaseModel):
    message: str | None = None
    product: ProductOut


class ProductPage(BaseModel):
    total: int
    page: int
    pages: int
    limit: int
    has_next: bool
    has_prev: bool
    items: list[ProductOut]
