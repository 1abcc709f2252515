"""Tax router - public tax list and admin tax configuration CRUD"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .schemas import (
    PublicTaxConfiguration,
    TaxConfigurationCreate,
    TaxConfigurationResponse,
    TaxConfigurationUpdate,
)
from .service import TaxConfigurationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tax-configurations", tags=["Taxes"])
admin_router = APIRouter(prefix="/api/admin/tax-configurations", tags=["Admin", "Taxes"])


def get_tax_service(db: Session = Depends(get_db)) -> TaxConfigurationService:
    """Dependency injection for TaxConfigurationService"""
    return TaxConfigurationService(db)


@router.get("/public", response_model=list[PublicTaxConfiguration])
async def list_public_tax_configurations(service: TaxConfigurationService = Depends(get_tax_service)):
    """Enabled tax configurations, used to show a price breakdown before checkout"""
    return service.list_public_configurations()


# ============================================================================
# ADMIN CRUD
# ============================================================================


@admin_router.get("", response_model=list[TaxConfigurationResponse])
async def list_tax_configurations(
    _admin: User = Depends(require_admin),
    service: TaxConfigurationService = Depends(get_tax_service),
):
    return service.list_configurations()


@admin_router.post("", response_model=TaxConfigurationResponse, status_code=201)
async def create_tax_configuration(
    data: TaxConfigurationCreate,
    admin: User = Depends(require_admin),
    service: TaxConfigurationService = Depends(get_tax_service),
):
    return service.create_configuration(data, admin)


@admin_router.get("/{config_id}", response_model=TaxConfigurationResponse)
async def get_tax_configuration(
    config_id: int,
    _admin: User = Depends(require_admin),
    service: TaxConfigurationService = Depends(get_tax_service),
):
    return service.get_configuration(config_id)


@admin_router.put("/{config_id}", response_model=TaxConfigurationResponse)
async def update_tax_configuration(
    config_id: int,
    data: TaxConfigurationUpdate,
    _admin: User = Depends(require_admin),
    service: TaxConfigurationService = Depends(get_tax_service),
):
    return service.update_configuration(config_id, data)


@admin_router.delete("/{config_id}")
async def delete_tax_configuration(
    config_id: int,
    _admin: User = Depends(require_admin),
    service: TaxConfigurationService = Depends(get_tax_service),
):
    service.delete_configuration(config_id)
    return {"success": True, "message": "Tax configuration deleted successfully"}
