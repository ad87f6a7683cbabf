# backend/routes/products.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.product import ProductPage, ProductPricing, ProductWithDiscount
from utils.errors import ProductNotFound
from utils.pricing import PricingFacade
from utils.repositories import CampaignRepository, ProductRepository

router = APIRouter(prefix="/products", tags=["Products"])

def _pricing(db: Session) -> PricingFacade:
    return PricingFacade(CampaignRepository(db))

def _active_product(db: Session, product_id: int):
    product = ProductRepository(db).find_by_id(product_id)
    if not product or not product.is_active:
        raise ProductNotFound()
    return product

# ---- PUBLIC CATALOGUE ----
@router.get("", response_model=ProductPage)
def list_products(
    q: Optional[str] = Query(None, description="Search in name and description"),
    category_id: Optional[int] = None,
    seller_id: Optional[int] = None,
    in_stock: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    products, total = ProductRepository(db).find(
        q=q, category_id=category_id, seller_id=seller_id,
        in_stock=in_stock, page=page, page_size=page_size,
    )
    items = _pricing(db).with_discount_many(products)
    return ProductPage(items=items, total=total, page=page, page_size=page_size)

@router.get("/{product_id}", response_model=ProductWithDiscount)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _pricing(db).with_discount(_active_product(db, product_id))

@router.get("/{product_id}/price", response_model=ProductPricing)
def get_product_price(product_id: int, db: Session = Depends(get_db)):
    return _pricing(db).price_with_discount(_active_product(db, product_id))
