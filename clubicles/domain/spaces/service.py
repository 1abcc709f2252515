"""Space service - public listings and owner space management"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import BASIC_PLAN_MAX_SPACES
from ...models import SpaceOwner, SpaceOwnerBusinessInfo
from ...models_booking import Booking, Space
from ...vibgyor import space_counts, summarize_counts
from .repository import SpaceRepository
from .schemas import SpaceCreate, SpaceResponse, SpaceUpdate

logger = logging.getLogger(__name__)

MIN_SUGGESTION_LENGTH = 2
MAX_SUGGESTIONS = 10


def matches_search(space: Space, term: str) -> bool:
    """Case-insensitive match over the listing text fields and amenities"""
    term = term.strip().lower()
    fields = [
        space.name,
        space.description,
        space.address,
        space.city,
        space.pincode,
        space.company_name,
    ]
    if any(term in (value or "").lower() for value in fields):
        return True
    return any(term in str(amenity).lower() for amenity in (space.amenities or []))


def serialize_space(space: Space, rating: tuple[float, int] = (0.0, 0)) -> dict[str, Any]:
    business = space.business
    data = SpaceResponse.model_validate(space).model_dump()
    data.update(
        {
            "amenities": space.amenities or [],
            "images": space.images or [],
            "business_name": business.business_name if business else None,
            "company_name": space.company_name or (business.business_name if business else None),
            "rating": rating[0],
            "total_reviews": rating[1],
            "vibgyor_counts": space_counts(space),
        }
    )
    return data


class SpaceService:
    """Service for space operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SpaceRepository()

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def list_public_spaces(
        self,
        city: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        spaces = self.repo.get_public_spaces(self.db, city, min_price, max_price)
        if search and search.strip():
            spaces = [space for space in spaces if matches_search(space, search)]

        ratings = self.repo.rating_stats(self.db, [space.id for space in spaces])
        return [serialize_space(space, ratings.get(space.id, (0.0, 0))) for space in spaces]

    def search_suggestions(self, query: Optional[str]) -> list[dict[str, Any]]:
        """Typeahead entries for spaces, businesses, cities and amenities matching the query"""
        term = (query or "").strip()
        if len(term) < MIN_SUGGESTION_LENGTH:
            return []

        spaces = self.repo.suggest(self.db, term)
        suggestions = [
            {"type": "space", "value": space.name, "category": "Workspace", "location": f"{space.city}, India"}
            for space in spaces
        ]
        suggestions += [
            {
                "type": "business",
                "value": business.business_name,
                "category": business.business_type or "Business",
                "location": f"{business.business_city}, India" if business.business_city else "India",
            }
            for business in self.repo.suggest_businesses(self.db, term)
        ]
        cities = list(dict.fromkeys(space.city for space in spaces))[:5]
        suggestions += [
            {"type": "city", "value": city, "category": "Location", "location": f"{city}, India"} for city in cities
        ]
        amenities = [
            amenity
            for amenity in dict.fromkeys(a for space in spaces for a in (space.amenities or []))
            if isinstance(amenity, str) and term.lower() in amenity.lower()
        ][:5]
        suggestions += [
            {"type": "amenity", "value": amenity, "category": "Amenity", "location": "Available"}
            for amenity in amenities
        ]

        unique = {}
        for suggestion in suggestions:
            unique.setdefault(suggestion["value"], suggestion)
        return list(unique.values())[:MAX_SUGGESTIONS]

    def get_space_detail(self, space_id: int) -> dict[str, Any]:
        space = self.repo.get_public_by_id(self.db, space_id)
        if not space:
            raise HTTPException(status_code=404, detail="Space not found")

        rating = self.repo.rating_stats(self.db, [space.id]).get(space.id, (0.0, 0))
        data = serialize_space(space, rating)
        data["reviews_summary"] = {"average_rating": rating[0], "total_reviews": rating[1]}
        data["booking_stats"] = self.repo.booking_stats(self.db, space.id)
        return data

    def get_space_reviews(self, space_id: int) -> list[dict[str, Any]]:
        if not self.repo.get_public_by_id(self.db, space_id):
            raise HTTPException(status_code=404, detail="Space not found")

        return [
            {
                "id": review.id,
                "rating": review.rating,
                "review_text": review.review_text,
                "overall_experience": review.overall_experience,
                "cleanliness": review.cleanliness,
                "restroom_hygiene": review.restroom_hygiene,
                "amenities": review.amenities,
                "staff_service": review.staff_service,
                "wifi_quality": review.wifi_quality,
                "user_name": (review.user.first_name if review.user else None) or "Anonymous",
                "created_at": review.created_at,
            }
            for review in self.repo.get_reviews(self.db, space_id)
        ]

    def get_space_vibgyor(self, space_id: int) -> dict[str, Any]:
        space = self.repo.get_public_by_id(self.db, space_id)
        if not space:
            raise HTTPException(status_code=404, detail="Space not found")
        summary = summarize_counts(space_counts(space))
        summary["space_id"] = space.id
        summary["space_name"] = space.name
        return summary

    # ------------------------------------------------------------------
    # Owner
    # ------------------------------------------------------------------

    def _business(self, owner: SpaceOwner, missing_status: int) -> SpaceOwnerBusinessInfo:
        business = owner.business_info
        if not business:
            detail = "Business info not found"
            if missing_status == 400:
                detail = "Business info not found. Please complete your business profile first."
            raise HTTPException(status_code=missing_status, detail=detail)
        return business

    def _check_space_limit(self, owner: SpaceOwner, business_id: int) -> None:
        """Basic plans may keep a limited number of active spaces; archived ones do not count"""
        if owner.premium_plan == "premium":
            return
        existing = self.repo.count_business_spaces(self.db, business_id)
        if existing >= BASIC_PLAN_MAX_SPACES:
            logger.info(f"⚠️ Owner {owner.id} hit the basic plan space limit ({existing})")
            raise HTTPException(
                status_code=403,
                detail=f"Basic plan allows up to {BASIC_PLAN_MAX_SPACES} spaces. Upgrade to premium to add more.",
            )

    def _owned_space(self, owner: SpaceOwner, space_id: int) -> Space:
        business = self._business(owner, 404)
        space = self.repo.get_business_space(self.db, business.id, space_id)
        if not space:
            raise HTTPException(status_code=404, detail="Space not found")
        return space

    def list_owner_spaces(self, owner: SpaceOwner) -> list[dict[str, Any]]:
        business = self._business(owner, 404)
        spaces = self.repo.get_business_spaces(self.db, business.id)
        ratings = self.repo.rating_stats(self.db, [space.id for space in spaces])
        return [serialize_space(space, ratings.get(space.id, (0.0, 0))) for space in spaces]

    def get_owner_space(self, owner: SpaceOwner, space_id: int) -> dict[str, Any]:
        space = self._owned_space(owner, space_id)
        rating = self.repo.rating_stats(self.db, [space.id]).get(space.id, (0.0, 0))
        data = serialize_space(space, rating)
        data["booking_stats"] = self.repo.booking_stats(self.db, space.id)
        return data

    def create_space(self, owner: SpaceOwner, data: SpaceCreate) -> Space:
        business = self._business(owner, 400)

        self._check_space_limit(owner, business.id)

        if not (data.price_per_hour or data.price_per_day):
            raise HTTPException(status_code=400, detail="Set an hourly or daily price")

        try:
            values = data.model_dump()
            values["company_name"] = values.get("company_name") or business.business_name
            space = self.repo.create(
                self.db,
                business_id=business.id,
                available_seats=data.total_seats,
                status="active",
                **values,
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error creating space for owner {owner.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create space") from e

        logger.info(f"✅ Space created: {space.id} ({space.name}) for business {business.id}")
        return space

    def update_space(self, owner: SpaceOwner, space_id: int, data: SpaceUpdate) -> Space:
        space = self._owned_space(owner, space_id)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("status") == "active" and space.status != "active":
            self._check_space_limit(owner, space.business_id)

        if "total_seats" in updates and "available_seats" not in updates:
            # Keep the number of seats already taken when capacity changes
            taken = max(0, space.total_seats - space.available_seats)
            updates["available_seats"] = max(0, updates["total_seats"] - taken)
        total = updates.get("total_seats", space.total_seats)
        if updates.get("available_seats", space.available_seats) > total:
            raise HTTPException(status_code=400, detail="Available seats cannot exceed total seats")

        try:
            space = self.repo.update(self.db, space, **updates)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating space {space_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update space") from e

        logger.info(f"✅ Space updated: {space.id} fields={list(updates.keys())}")
        return space

    def delete_space(self, owner: SpaceOwner, space_id: int) -> str:
        """
        Remove a space. Spaces with pending or confirmed bookings cannot be removed;
        spaces with only past bookings are archived so booking history survives.
        """
        space = self._owned_space(owner, space_id)
        if self.repo.count_active_bookings(self.db, space.id) > 0:
            raise HTTPException(status_code=400, detail="Cannot delete space with active bookings")

        has_history = self.db.query(Booking.id).filter(Booking.space_id == space.id).first() is not None
        try:
            if has_history:
                self.repo.update(self.db, space, status="inactive")
                logger.info(f"📦 Space {space_id} archived (has booking history)")
                return "archived"
            self.repo.delete(self.db, space)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting space {space_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete space") from e

        logger.info(f"🗑️ Space {space_id} deleted by owner {owner.id}")
        return "deleted"
