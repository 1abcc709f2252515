"""Space domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_indian_phone, validate_pincode


class SpaceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1, max_length=100)
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    total_seats: int = Field(..., ge=1)
    price_per_hour: Optional[float] = Field(None, ge=0)
    price_per_day: Optional[float] = Field(None, ge=0)
    amenities: list[str] = []
    images: list[str] = []
    company_name: Optional[str] = None
    contact_number: Optional[str] = None

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, v):
        return validate_pincode(v)

    @field_validator("contact_number")
    @classmethod
    def check_contact_number(cls, v):
        if v:
            return validate_indian_phone(v)
        return v


class SpaceCreate(SpaceBase):
    pass


class SpaceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    total_seats: Optional[int] = Field(None, ge=1)
    available_seats: Optional[int] = Field(None, ge=0)
    price_per_hour: Optional[float] = Field(None, ge=0)
    price_per_day: Optional[float] = Field(None, ge=0)
    amenities: Optional[list[str]] = None
    images: Optional[list[str]] = None
    company_name: Optional[str] = None
    contact_number: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, v):
        return validate_pincode(v)


class SpaceResponse(BaseModel):
    id: int
    business_id: int
    name: str
    description: Optional[str] = None
    address: str
    city: str
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    total_seats: int
    available_seats: int
    price_per_hour: Optional[float] = None
    price_per_day: Optional[float] = None
    amenities: Optional[list[str]] = None
    images: Optional[list[str]] = None
    company_name: Optional[str] = None
    contact_number: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
