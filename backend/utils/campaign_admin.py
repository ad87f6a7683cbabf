# backend/utils/campaign_admin.py
import logging
from datetime import datetime
from typing import List, Optional

from models.campaign import ScopeType
from schemas.campaign import (
    CampaignOut,
    PlatformCampaignCreate,
    PlatformCampaignUpdate,
    SellerCampaignCreate,
    SellerCampaignUpdate,
    validate_dates,
    validate_discount,
)
from utils.campaign_rules import is_effectively_active, utcnow
from utils.errors import (
    CampaignActive,
    CampaignNameConflict,
    InvalidCampaignDates,
    ProductNotFound,
    ProductNotOwnedBySeller,
)
from utils.repositories import CampaignRepository, ProductRepository

logger = logging.getLogger(__name__)


def _require_future_start(start_date: datetime, now: datetime) -> None:
    if start_date <= now:
        raise InvalidCampaignDates("Start date must be in the future")


class CampaignAdmin:
    """
    Campaign lifecycle for sellers (own products only) and admins
    (platform-wide). Passing seller_id restricts an operation to that
    seller's campaigns; admins pass None.
    """

    def __init__(self, campaigns: CampaignRepository, products: ProductRepository):
        self.campaigns = campaigns
        self.products = products

    # Listed products must all belong to the seller; an empty list means all of them
    def _seller_scope(self, seller_id: int, product_ids: List[int]) -> List[int]:
        if product_ids:
            wanted = set(product_ids)
            if self.products.ids_owned_by(seller_id, wanted) != wanted:
                raise ProductNotOwnedBySeller()
            return sorted(wanted)

        own = self.products.active_ids_of_seller(seller_id)
        if not own:
            raise ProductNotFound("No active products found. Please add products before creating a campaign.")
        return own

    def _platform_scope(self, product_ids: List[int]) -> List[int]:
        wanted = set(product_ids or [])
        if wanted and self.products.existing_ids(wanted) != wanted:
            raise ProductNotFound("One or more products not found")
        return sorted(wanted)

    def create_seller_campaign(self, seller_id: int, payload: SellerCampaignCreate, now: Optional[datetime] = None) -> CampaignOut:
        now = now or utcnow()
        _require_future_start(payload.start_date, now)
        validate_dates(payload.start_date, payload.end_date)
        validate_discount(payload.discount_type, payload.discount_value)

        if self.campaigns.name_taken(seller_id, payload.name):
            raise CampaignNameConflict()

        product_ids = self._seller_scope(seller_id, payload.product_ids)
        campaign = self.campaigns.add(
            **payload.model_dump(exclude={"product_ids"}),
            scope_type=ScopeType.SELLER,
            seller_id=seller_id,
            product_ids=product_ids,
            category_ids=[],
        )
        logger.info(f"Seller {seller_id} created campaign {campaign.id} ({campaign.name})")
        return campaign

    def create_platform_campaign(self, payload: PlatformCampaignCreate, now: Optional[datetime] = None) -> CampaignOut:
        now = now or utcnow()
        _require_future_start(payload.start_date, now)
        validate_dates(payload.start_date, payload.end_date)
        validate_discount(payload.discount_type, payload.discount_value)

        campaign = self.campaigns.add(
            **payload.model_dump(exclude={"product_ids", "category_ids"}),
            scope_type=ScopeType.PLATFORM,
            seller_id=None,
            product_ids=self._platform_scope(payload.product_ids),
            category_ids=sorted(set(payload.category_ids)),
        )
        logger.info(f"Platform campaign {campaign.id} created ({campaign.name})")
        return campaign

    def update_campaign(
        self,
        campaign_id: int,
        payload: SellerCampaignUpdate,
        seller_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> CampaignOut:
        now = now or utcnow()
        current = self.campaigns.get(campaign_id, seller_id)
        # Explicit nulls only clear the optional fields
        changes = {
            k: v for k, v in payload.model_dump(exclude_unset=True).items()
            if v is not None or k in ("description", "max_discount_amount")
        }

        if seller_id is not None:
            changes.pop("category_ids", None)
            if "start_date" in changes or "end_date" in changes:
                _require_future_start(changes.get("start_date") or current.start_date, now)
            if "product_ids" in changes:
                changes["product_ids"] = self._seller_scope(seller_id, changes["product_ids"] or [])
            if changes.get("name") and changes["name"] != current.name:
                if self.campaigns.name_taken(seller_id, changes["name"], exclude_id=campaign_id):
                    raise CampaignNameConflict()
        elif isinstance(payload, PlatformCampaignUpdate) and "product_ids" in changes:
            changes["product_ids"] = self._platform_scope(changes["product_ids"])

        if changes.get("category_ids") is not None:
            changes["category_ids"] = sorted(set(changes["category_ids"]))

        # Dates and discount are re-validated on the merged campaign
        updated = current.with_changes(**changes)
        saved = self.campaigns.save(updated)
        logger.info(f"Campaign {campaign_id} updated: {sorted(changes)}")
        return saved

    def toggle_campaign(self, campaign_id: int, seller_id: Optional[int] = None) -> CampaignOut:
        current = self.campaigns.get(campaign_id, seller_id)
        saved = self.campaigns.save(current.with_active(not current.is_active))
        logger.info(f"Campaign {campaign_id} is_active={saved.is_active}")
        return saved

    def delete_campaign(self, campaign_id: int, seller_id: Optional[int] = None, now: Optional[datetime] = None) -> None:
        current = self.campaigns.get(campaign_id, seller_id)
        if is_effectively_active(current, now or utcnow()):
            raise CampaignActive()
        self.campaigns.delete(campaign_id)
        logger.info(f"Campaign {campaign_id} deleted")
