from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional

# Annual income brackets; rates are percentages.
DEFAULT_BRACKETS = [
    {"min": 0, "max": 15000, "rate": 0},
    {"min": 15000, "max": 30000, "rate": 2.5},
    {"min": 30000, "max": 45000, "rate": 10},
    {"min": 45000, "max": 60000, "rate": 15},
    {"min": 60000, "max": 200000, "rate": 20},
    {"min": 200000, "max": 400000, "rate": 22.5},
    {"min": 400000, "max": None, "rate": 25},
]


@dataclass
class TaxBracket:
    lower: Decimal
    upper: Optional[Decimal]  # None = unbounded
    rate: Decimal             # percent

    def taxable_portion(self, income: Decimal) -> Decimal:
        if income <= self.lower:
            return Decimal("0")
        ceiling = income if self.upper is None else min(income, self.upper)
        return ceiling - self.lower


class TaxTable:
    def __init__(self, brackets: List[TaxBracket]):
        if not brackets:
            raise ValueError("Tax table needs at least one bracket")
        self.brackets = sorted(brackets, key=lambda b: b.lower)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping]) -> "TaxTable":
        brackets = []
        for row in rows:
            upper = row.get("max")
            brackets.append(
                TaxBracket(
                    lower=Decimal(str(row.get("min", 0))),
                    upper=None if upper is None else Decimal(str(upper)),
                    rate=Decimal(str(row["rate"])),
                )
            )
        return cls(brackets)

    @classmethod
    def default(cls) -> "TaxTable":
        return cls.from_rows(DEFAULT_BRACKETS)

    def annual_tax(self, annual_income: Decimal) -> Decimal:
        total_tax = Decimal("0")
        for bracket in self.brackets:
            total_tax += bracket.taxable_portion(annual_income) * bracket.rate / 100
        return total_tax

    def monthly_tax(self, monthly_income: Decimal) -> Decimal:
        """Withholding for one month, computed on the annualised income."""
        if monthly_income <= 0:
            return Decimal("0")
        return self.annual_tax(monthly_income * 12) / 12
