# backend/schemas/campaign.py
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.campaign import DiscountType, ScopeType
from utils.errors import InvalidCampaignDates, InvalidDiscountValue


# Timestamps are compared as naive UTC throughout the engine
def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def validate_discount(discount_type: DiscountType, discount_value: float) -> None:
    if discount_type == DiscountType.PERCENTAGE:
        if not 1 <= discount_value <= 100:
            raise InvalidDiscountValue("Discount percentage must be between 1 and 100")
    elif discount_value <= 0:
        raise InvalidDiscountValue("Discount amount must be greater than 0")


def validate_dates(start_date: datetime, end_date: datetime) -> None:
    if end_date <= start_date:
        raise InvalidCampaignDates("End date must be after start date")


class CampaignOut(BaseModel):
    """
    Immutable campaign value read fresh for every pricing computation.

    Construction checks the date and discount invariants, so an invalid
    campaign can neither be built from a row nor produced by an update.
    Updates go through with_active / with_changes and return new instances.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    description: Optional[str] = None
    scope_type: ScopeType
    seller_id: Optional[int] = None
    discount_type: DiscountType
    discount_value: float
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    product_ids: Tuple[int, ...] = ()
    category_ids: Tuple[int, ...] = ()
    min_order_amount: float = 0
    max_discount_amount: Optional[float] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return _naive_utc(value)

    @field_validator("product_ids", "category_ids", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return () if value is None else value

    @model_validator(mode="after")
    def check_invariants(self):
        validate_dates(self.start_date, self.end_date)
        validate_discount(self.discount_type, self.discount_value)
        return self

    @property
    def has_empty_scope(self) -> bool:
        return not self.product_ids and not self.category_ids

    def with_changes(self, **changes) -> "CampaignOut":
        data = self.model_dump()
        data.update(changes)
        return CampaignOut.model_validate(data)

    def with_active(self, is_active: bool) -> "CampaignOut":
        return self.with_changes(is_active=is_active)


# Shared request fields for both campaign owners
class CampaignCreateBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    discount_type: DiscountType
    discount_value: float
    start_date: datetime
    end_date: datetime
    product_ids: List[int] = Field(default_factory=list)
    is_active: bool = True
    min_order_amount: float = Field(default=0, ge=0)
    max_discount_amount: Optional[float] = Field(default=None, gt=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return _naive_utc(value)


# Seller campaigns cover the seller's own products only
class SellerCampaignCreate(CampaignCreateBase):
    pass


# Platform campaigns may also target whole categories
class PlatformCampaignCreate(CampaignCreateBase):
    category_ids: List[int] = Field(default_factory=list)


# Schema for partial campaign updates (PATCH)
class SellerCampaignUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    product_ids: Optional[List[int]] = None
    is_active: Optional[bool] = None
    min_order_amount: Optional[float] = Field(default=None, ge=0)
    max_discount_amount: Optional[float] = Field(default=None, gt=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value):
        return _naive_utc(value)


class PlatformCampaignUpdate(SellerCampaignUpdate):
    category_ids: Optional[List[int]] = None


class CampaignPage(BaseModel):
    items: List[CampaignOut]
    total: int
    page: int
    page_size: int
