"""Review domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DetailedRatings(BaseModel):
    overall_experience: Optional[int] = Field(None, ge=1, le=5)
    cleanliness: Optional[int] = Field(None, ge=1, le=5)
    restroom_hygiene: Optional[int] = Field(None, ge=1, le=5)
    amenities: Optional[int] = Field(None, ge=1, le=5)
    staff_service: Optional[int] = Field(None, ge=1, le=5)
    wifi_quality: Optional[int] = Field(None, ge=1, le=5)


class ReviewCreate(DetailedRatings):
    space_id: int
    rating: int = Field(..., ge=1, le=5)
    review_text: str = Field(..., min_length=1, max_length=5000)


class ReviewUpdate(DetailedRatings):
    rating: Optional[int] = Field(None, ge=1, le=5)
    review_text: Optional[str] = Field(None, min_length=1, max_length=5000)


class ReviewUpdateBySpace(ReviewUpdate):
    space_id: int


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    space_id: int
    booking_id: Optional[int] = None
    rating: int
    review_text: str
    overall_experience: Optional[int] = None
    cleanliness: Optional[int] = None
    restroom_hygiene: Optional[int] = None
    amenities: Optional[int] = None
    staff_service: Optional[int] = None
    wifi_quality: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
