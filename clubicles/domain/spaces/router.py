"""Space router - public listings and owner space CRUD"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_owner
from ...database import get_db
from ...models import SpaceOwner
from .schemas import SpaceCreate, SpaceUpdate
from .service import SpaceService, serialize_space

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/spaces", tags=["Spaces"])
owner_router = APIRouter(prefix="/api/owner/spaces", tags=["Owner", "Spaces"])


def get_space_service(db: Session = Depends(get_db)) -> SpaceService:
    """Dependency injection for SpaceService"""
    return SpaceService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("")
async def list_spaces(
    city: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None),
    service: SpaceService = Depends(get_space_service),
):
    """Browse bookable spaces from approved owners"""
    spaces = service.list_public_spaces(city, min_price, max_price, search)
    return {"success": True, "spaces": spaces, "count": len(spaces)}


@router.get("/search-suggestions")
async def search_suggestions(q: Optional[str] = Query(None), service: SpaceService = Depends(get_space_service)):
    return {"success": True, "suggestions": service.search_suggestions(q)}


@router.get("/{space_id}")
async def get_space(space_id: int, service: SpaceService = Depends(get_space_service)):
    return {"success": True, "space": service.get_space_detail(space_id)}


@router.get("/{space_id}/reviews")
async def get_space_reviews(space_id: int, service: SpaceService = Depends(get_space_service)):
    reviews = service.get_space_reviews(space_id)
    return {"success": True, "reviews": reviews, "total": len(reviews)}


@router.get("/{space_id}/vibgyor")
async def get_space_vibgyor(space_id: int, service: SpaceService = Depends(get_space_service)):
    """Professional-role mix of the people who have used this space"""
    return {"success": True, **service.get_space_vibgyor(space_id)}


# ============================================================================
# OWNER
# ============================================================================


@owner_router.get("")
async def list_owner_spaces(
    owner: SpaceOwner = Depends(get_current_owner),
    service: SpaceService = Depends(get_space_service),
):
    spaces = service.list_owner_spaces(owner)
    return {"success": True, "spaces": spaces, "total": len(spaces)}


@owner_router.post("", status_code=201)
async def create_space(
    data: SpaceCreate,
    owner: SpaceOwner = Depends(get_current_owner),
    service: SpaceService = Depends(get_space_service),
):
    space = service.create_space(owner, data)
    return {"success": True, "message": "Space created successfully", "space": serialize_space(space)}


@owner_router.get("/{space_id}")
async def get_owner_space(
    space_id: int,
    owner: SpaceOwner = Depends(get_current_owner),
    service: SpaceService = Depends(get_space_service),
):
    return {"success": True, "space": service.get_owner_space(owner, space_id)}


@owner_router.put("/{space_id}")
async def update_space(
    space_id: int,
    data: SpaceUpdate,
    owner: SpaceOwner = Depends(get_current_owner),
    service: SpaceService = Depends(get_space_service),
):
    space = service.update_space(owner, space_id, data)
    return {"success": True, "message": "Space updated successfully", "space": serialize_space(space)}


@owner_router.delete("/{space_id}")
async def delete_space(
    space_id: int,
    owner: SpaceOwner = Depends(get_current_owner),
    service: SpaceService = Depends(get_space_service),
):
    outcome = service.delete_space(owner, space_id)
    message = "Space deleted successfully" if outcome == "deleted" else "Space archived (it has booking history)"
    return {"success": True, "message": message, "result": outcome}
