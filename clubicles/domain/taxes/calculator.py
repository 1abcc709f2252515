"""Tax calculator - applies enabled tax configurations to an amount"""

from dataclasses import dataclass, field
from typing import Iterable

PLATFORM_FEE_NAME = "Platform Fee"
PREMIUM_PLATFORM_FEE_FACTOR = 0.5


@dataclass
class TaxLine:
    tax_configuration_id: int
    name: str
    rate: float
    amount: float


@dataclass
class TaxBreakdown:
    amount: float
    lines: list[TaxLine] = field(default_factory=list)

    @property
    def total_tax(self) -> float:
        return round(sum(line.amount for line in self.lines), 2)

    @property
    def platform_commission(self) -> float:
        return round(sum(line.amount for line in self.lines if line.name == PLATFORM_FEE_NAME), 2)

    @property
    def owner_payout(self) -> float:
        return round(self.amount - self.total_tax, 2)


def effective_rate(config, premium_payments_enabled: bool) -> float:
    """Configured percentage, halved for the platform fee when premium payments are on"""
    rate = float(config.percentage)
    if config.name == PLATFORM_FEE_NAME and premium_payments_enabled:
        rate *= PREMIUM_PLATFORM_FEE_FACTOR
    return rate


def calculate_taxes(amount: float, tax_configs: Iterable, premium_payments_enabled: bool = False) -> TaxBreakdown:
    breakdown = TaxBreakdown(amount=float(amount))
    for config in tax_configs:
        rate = effective_rate(config, premium_payments_enabled)
        breakdown.lines.append(
            TaxLine(
                tax_configuration_id=config.id,
                name=config.name,
                rate=rate,
                amount=round(float(amount) * rate / 100, 2),
            )
        )
    return breakdown


def apportion(value: float, share: float, whole: float) -> float:
    """Split `value` in proportion share/whole"""
    if whole <= 0:
        return 0.0
    return round(value * share / whole, 2)
