"""Request bodies for the JSON API."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PostIn(BaseModel):
    user_id: int
    city: str = Field(..., min_length=1, max_length=255)
    sector: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    product: str = Field(..., max_length=255)
    type: str = Field(..., max_length=255)
    bedrooms: int = Field(default=0, ge=0, le=255)
    bathrooms: int = Field(default=0, ge=0, le=255)
    area: Decimal = Field(..., ge=0, max_digits=8, decimal_places=2)
    address: str = Field(..., max_length=255)
    address_maps: str = Field(..., max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    description: str
    image: str | None = Field(default=None, max_length=255)


class PostUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    city: str | None = Field(default=None, min_length=1, max_length=255)
    sector: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    product: str | None = Field(default=None, max_length=255)
    type: str | None = Field(default=None, max_length=255)
    bedrooms: int | None = Field(default=None, ge=0, le=255)
    bathrooms: int | None = Field(default=None, ge=0, le=255)
    area: Decimal | None = Field(default=None, ge=0, max_digits=8, decimal_places=2)
    address: str | None = Field(default=None, max_length=255)
    address_maps: str | None = Field(default=None, max_length=255)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    image: str | None = Field(default=None, max_length=255)


class LikeIn(BaseModel):
    user_id: int
