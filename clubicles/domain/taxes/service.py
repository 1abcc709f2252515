"""Tax service - Business logic for tax configuration management"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...models_booking import TaxConfiguration
from .repository import TaxConfigurationRepository
from .schemas import TaxConfigurationCreate, TaxConfigurationUpdate

logger = logging.getLogger(__name__)


def validate_percentage(percentage: float) -> None:
    if percentage < 0 or percentage > 100:
        raise HTTPException(status_code=400, detail="Percentage must be between 0 and 100")


class TaxConfigurationService:
    """Service for tax configuration operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TaxConfigurationRepository()

    def list_configurations(self) -> list[TaxConfiguration]:
        return self.repo.get_all(self.db)

    def list_public_configurations(self) -> list[TaxConfiguration]:
        return self.repo.get_enabled(self.db)

    def get_configuration(self, config_id: int) -> TaxConfiguration:
        config = self.repo.get_by_id(self.db, config_id)
        if not config:
            raise HTTPException(status_code=404, detail="Tax configuration not found")
        return config

    def create_configuration(self, data: TaxConfigurationCreate, admin: User) -> TaxConfiguration:
        name = data.name.strip()
        if not name or not data.applies_to.strip():
            raise HTTPException(status_code=400, detail="Name, percentage and applies_to are required")
        validate_percentage(data.percentage)

        if self.repo.get_by_name(self.db, name):
            raise HTTPException(status_code=400, detail="Tax configuration with this name already exists")

        try:
            config = self.repo.create(
                self.db,
                name=name,
                percentage=data.percentage,
                applies_to=data.applies_to.strip(),
                is_enabled=data.is_enabled,
                description=data.description,
                created_by=admin.id,
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create tax configuration: {e}")
            raise HTTPException(status_code=500, detail="Failed to create tax configuration") from e

        logger.info(f"✅ Tax configuration created: {config.name} ({config.percentage}%) by admin {admin.id}")
        return config

    def update_configuration(self, config_id: int, data: TaxConfigurationUpdate) -> TaxConfiguration:
        config = self.get_configuration(config_id)

        if data.percentage is not None:
            validate_percentage(data.percentage)

        if data.name is not None:
            name = data.name.strip()
            existing = self.repo.get_by_name(self.db, name)
            if existing and existing.id != config.id:
                raise HTTPException(status_code=400, detail="Tax configuration with this name already exists")
            data.name = name

        config = self.repo.update(self.db, config, **data.model_dump(exclude_unset=True))
        logger.info(f"✅ Tax configuration {config.id} updated")
        return config

    def delete_configuration(self, config_id: int) -> None:
        config = self.get_configuration(config_id)

        if self.repo.count_booking_taxes(self.db, config.id) > 0:
            raise HTTPException(
                status_code=400,
                detail="Cannot delete tax configuration that is used by existing bookings. Disable it instead.",
            )

        self.repo.delete(self.db, config)
        logger.info(f"🗑️ Tax configuration {config_id} deleted")
