"""Tax configuration repository - Database operations for tax configurations"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_booking import BookingTax, TaxConfiguration


class TaxConfigurationRepository:
    """Repository for tax configuration database operations"""

    @staticmethod
    def get_all(db: Session) -> list[TaxConfiguration]:
        return db.query(TaxConfiguration).order_by(TaxConfiguration.created_at.asc(), TaxConfiguration.id.asc()).all()

    @staticmethod
    def get_enabled(db: Session) -> list[TaxConfiguration]:
        """Enabled configurations in creation order"""
        return (
            db.query(TaxConfiguration)
            .filter(TaxConfiguration.is_enabled.is_(True))
            .order_by(TaxConfiguration.created_at.asc(), TaxConfiguration.id.asc())
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, config_id: int) -> Optional[TaxConfiguration]:
        return db.query(TaxConfiguration).filter(TaxConfiguration.id == config_id).first()

    @staticmethod
    def get_by_name(db: Session, name: str) -> Optional[TaxConfiguration]:
        return db.query(TaxConfiguration).filter(TaxConfiguration.name == name).first()

    @staticmethod
    def create(db: Session, **data) -> TaxConfiguration:
        config = TaxConfiguration(**data)
        db.add(config)
        db.commit()
        db.refresh(config)
        return config

    @staticmethod
    def update(db: Session, config: TaxConfiguration, **updates) -> TaxConfiguration:
        for key, value in updates.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)
        db.commit()
        db.refresh(config)
        return config

    @staticmethod
    def delete(db: Session, config: TaxConfiguration) -> None:
        db.delete(config)
        db.commit()

    @staticmethod
    def count_booking_taxes(db: Session, config_id: int) -> int:
        """Number of booking tax rows that reference the configuration"""
        return db.query(BookingTax).filter(BookingTax.tax_configuration_id == config_id).count()
