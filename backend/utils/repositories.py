# backend/utils/repositories.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.campaign import Campaign, ScopeType
from models.product import Product
from schemas.campaign import CampaignOut
from schemas.product import ProductOut
from utils.campaign_rules import is_applicable, utcnow
from utils.errors import CampaignNotFound, ProductNotFound, ShopError

logger = logging.getLogger(__name__)


class ProductRepository:
    """Read access to the catalogue; stock is only written by checkout."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, product_id: int) -> Optional[ProductOut]:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        return ProductOut.model_validate(product) if product else None

    def find(
        self,
        q: Optional[str] = None,
        category_id: Optional[int] = None,
        seller_id: Optional[int] = None,
        in_stock: bool = False,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[ProductOut], int]:
        query = self.db.query(Product).filter(Product.is_active == True)  # noqa: E712

        if q:
            like = f"%{q}%"
            query = query.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if seller_id is not None:
            query = query.filter(Product.seller_id == seller_id)
        if in_stock:
            query = query.filter(Product.stock > 0)

        total = query.count()
        rows = query.order_by(Product.id.asc()).offset((page - 1) * page_size).limit(page_size).all()
        return [ProductOut.model_validate(p) for p in rows], total

    def existing_ids(self, product_ids: Iterable[int]) -> Set[int]:
        ids = list(product_ids)
        if not ids:
            return set()
        rows = self.db.query(Product.id).filter(Product.id.in_(ids)).all()
        return {r[0] for r in rows}

    def ids_owned_by(self, seller_id: int, product_ids: Iterable[int]) -> Set[int]:
        ids = list(product_ids)
        if not ids:
            return set()
        rows = self.db.query(Product.id).filter(Product.id.in_(ids), Product.seller_id == seller_id).all()
        return {r[0] for r in rows}

    def active_ids_of_seller(self, seller_id: int) -> List[int]:
        rows = (
            self.db.query(Product.id)
            .filter(Product.seller_id == seller_id, Product.is_active == True)  # noqa: E712
            .order_by(Product.id.asc())
            .all()
        )
        return [r[0] for r in rows]

    # Decrement stock, never below zero; the row is locked where the database supports it
    def reduce_stock(self, product_id: int, qty: int) -> ProductOut:
        product = self.db.query(Product).filter(Product.id == product_id).with_for_update().first()
        if not product:
            raise ProductNotFound(f"Product not found: {product_id}")
        product.stock = max(0, (product.stock or 0) - qty)
        self.db.commit()
        return ProductOut.model_validate(product)


class CampaignRepository:
    """Campaign rows exposed as immutable CampaignOut values, read fresh per call."""

    def __init__(self, db: Session):
        self.db = db

    def _to_values(self, rows) -> List[CampaignOut]:
        values = []
        for row in rows:
            try:
                values.append(CampaignOut.model_validate(row))
            except (ShopError, ValidationError) as e:
                # A malformed campaign is left out of pricing instead of failing it
                logger.warning(f"Ignoring malformed campaign {row.id}: {e}")
        return values

    def find_active(self, now: Optional[datetime] = None) -> List[CampaignOut]:
        now = now or utcnow()
        rows = (
            self.db.query(Campaign)
            .filter(
                Campaign.is_active == True,  # noqa: E712
                Campaign.start_date <= now,
                Campaign.end_date >= now,
            )
            .order_by(Campaign.id.asc())
            .all()
        )
        return self._to_values(rows)

    def find_active_for_product(self, product: ProductOut, now: Optional[datetime] = None) -> List[CampaignOut]:
        now = now or utcnow()
        return [c for c in self.find_active(now) if is_applicable(c, product, now)]

    def _row(self, campaign_id: int, seller_id: Optional[int] = None) -> Campaign:
        query = self.db.query(Campaign).filter(Campaign.id == campaign_id)
        if seller_id is not None:
            query = query.filter(Campaign.seller_id == seller_id)
        row = query.first()
        if not row:
            raise CampaignNotFound()
        return row

    def get(self, campaign_id: int, seller_id: Optional[int] = None) -> CampaignOut:
        return CampaignOut.model_validate(self._row(campaign_id, seller_id))

    def name_taken(self, seller_id: Optional[int], name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Campaign.id).filter(Campaign.seller_id == seller_id, Campaign.name == name)
        if exclude_id is not None:
            query = query.filter(Campaign.id != exclude_id)
        return query.first() is not None

    def find_all(
        self,
        seller_id: Optional[int] = None,
        scope_type: Optional[ScopeType] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[CampaignOut], int]:
        query = self.db.query(Campaign)
        if seller_id is not None:
            query = query.filter(Campaign.seller_id == seller_id)
        if scope_type is not None:
            query = query.filter(Campaign.scope_type == scope_type)
        if search:
            query = query.filter(Campaign.name.ilike(f"%{search}%"))

        total = query.count()
        rows = query.order_by(Campaign.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
        return self._to_values(rows), total

    def add(self, **fields) -> CampaignOut:
        row = Campaign(**fields)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return CampaignOut.model_validate(row)

    # Persist a value produced by CampaignOut.with_* back onto its row
    def save(self, campaign: CampaignOut) -> CampaignOut:
        row = self._row(campaign.id)
        data = campaign.model_dump(exclude={"id"})
        data["product_ids"] = list(campaign.product_ids)
        data["category_ids"] = list(campaign.category_ids)
        for field, value in data.items():
            setattr(row, field, value)
        self.db.commit()
        self.db.refresh(row)
        return CampaignOut.model_validate(row)

    def delete(self, campaign_id: int) -> None:
        self.db.delete(self._row(campaign_id))
        self.db.commit()
