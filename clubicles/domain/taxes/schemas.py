"""Tax domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TaxConfigurationCreate(BaseModel):
    name: str
    percentage: float
    applies_to: str
    is_enabled: bool = True
    description: Optional[str] = None


class TaxConfigurationUpdate(BaseModel):
    name: Optional[str] = None
    percentage: Optional[float] = None
    applies_to: Optional[str] = None
    is_enabled: Optional[bool] = None
    description: Optional[str] = None


class TaxConfigurationResponse(BaseModel):
    id: int
    name: str
    percentage: float
    is_enabled: bool
    applies_to: str
    description: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicTaxConfiguration(BaseModel):
    """Subset exposed to checkout pages"""

    id: int
    name: str
    percentage: float
    applies_to: str
    description: Optional[str] = None

    class Config:
        from_attributes = True
