"""
Application catalog and pricing matrix models.

PricingPeriod is the one entity with a real invariant: among active periods
of the same user type, [valid_from, valid_to) ranges never intersect, with a
missing valid_to meaning open-ended. Inactive periods are history.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from admin_console.models.common import UpstreamModel


class ApplicationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DEPRECATED = "deprecated"

    @property
    def badge(self) -> str:
        return _APPLICATION_BADGES[self]


_APPLICATION_BADGES = {
    ApplicationStatus.ACTIVE: "success",
    ApplicationStatus.INACTIVE: "default",
    ApplicationStatus.DEPRECATED: "warning",
}


class BillingCycle(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Currency(str, Enum):
    BRL = "BRL"
    USD = "USD"
    EUR = "EUR"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]


_CURRENCY_SYMBOLS = {
    Currency.BRL: "R$",
    Currency.USD: "$",
    Currency.EUR: "€",
}


class UserTypeSlug(str, Enum):
    OPERATIONS = "operations"
    MANAGER = "manager"
    ADMIN = "admin"


class PricingStatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Application(UpstreamModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.ACTIVE
    version: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PricingPeriod(UpstreamModel):
    id: Optional[Union[int, str]] = None
    application_id: Optional[int] = None
    user_type_id: int
    user_type_name: Optional[str] = None
    user_type_slug: Optional[UserTypeSlug] = None
    price: Optional[Decimal] = None
    currency: Currency = Currency.BRL
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    valid_from: datetime
    valid_to: Optional[datetime] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open_ended(self) -> bool:
        return self.valid_to is None

    def display_price(self) -> str:
        amount = self.price if self.price is not None else Decimal("0")
        return f"{self.currency.symbol} {amount:.2f}"


class PricingForm(UpstreamModel):
    """The "schedule new price" form. Fields stay loose so local validation can report them."""
    user_type_id: int = 1
    price: Optional[Decimal] = None
    currency: Currency = Currency.BRL
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
