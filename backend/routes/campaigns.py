# backend/routes/campaigns.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.campaign import ScopeType
from models.users import User
from schemas.campaign import (
    CampaignOut, CampaignPage,
    PlatformCampaignCreate, PlatformCampaignUpdate,
    SellerCampaignCreate, SellerCampaignUpdate,
)
from utils.audit import write_log
from utils.campaign_admin import CampaignAdmin
from utils.errors import ProductNotFound
from utils.repositories import CampaignRepository, ProductRepository
from utils.tokenJWT import role_required

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])
seller_router = APIRouter(prefix="/seller/campaigns", tags=["Seller campaigns"])
admin_router = APIRouter(prefix="/admin/campaigns", tags=["Admin campaigns"])

def get_campaign_admin(db: Session = Depends(get_db)) -> CampaignAdmin:
    return CampaignAdmin(CampaignRepository(db), ProductRepository(db))

def _audit(db: Session, request: Request, user: User, action: str, campaign_id, meta: dict = None):
    write_log(
        db,
        user_id=user.id,
        action=action,
        resource=f"campaign:{campaign_id}",
        status="SUCCESS",
        ip=request.client.host if request.client else None,
        meta=meta,
    )

# ---- PUBLIC ----
@router.get("", response_model=List[CampaignOut])
def list_active_campaigns(db: Session = Depends(get_db)):
    return CampaignRepository(db).find_active()

@router.get("/product/{product_id}", response_model=List[CampaignOut])
def list_campaigns_for_product(product_id: int, db: Session = Depends(get_db)):
    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise ProductNotFound()
    return CampaignRepository(db).find_active_for_product(product)

# ---- SELLER (own campaigns only) ----
@seller_router.get("", response_model=CampaignPage)
def list_seller_campaigns(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("SELLER")),
):
    items, total = CampaignRepository(db).find_all(
        seller_id=current_user.id, search=search, page=page, page_size=page_size
    )
    return CampaignPage(items=items, total=total, page=page, page_size=page_size)

@seller_router.post("", response_model=CampaignOut, status_code=status.HTTP_201_CREATED)
def create_seller_campaign(
    payload: SellerCampaignCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("SELLER")),
):
    campaign = admin.create_seller_campaign(current_user.id, payload)
    _audit(db, request, current_user, "CAMPAIGN_CREATE", campaign.id, {"name": campaign.name})
    return campaign

@seller_router.patch("/{campaign_id}", response_model=CampaignOut)
def update_seller_campaign(
    campaign_id: int,
    payload: SellerCampaignUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("SELLER")),
):
    campaign = admin.update_campaign(campaign_id, payload, seller_id=current_user.id)
    _audit(db, request, current_user, "CAMPAIGN_UPDATE", campaign_id,
           {"fields": sorted(payload.model_dump(exclude_unset=True))})
    return campaign

@seller_router.post("/{campaign_id}/toggle", response_model=CampaignOut)
def toggle_seller_campaign(
    campaign_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("SELLER")),
):
    campaign = admin.toggle_campaign(campaign_id, seller_id=current_user.id)
    _audit(db, request, current_user, "CAMPAIGN_TOGGLE", campaign_id, {"is_active": campaign.is_active})
    return campaign

@seller_router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_seller_campaign(
    campaign_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("SELLER")),
):
    admin.delete_campaign(campaign_id, seller_id=current_user.id)
    _audit(db, request, current_user, "CAMPAIGN_DELETE", campaign_id)
    return None

# ---- ADMIN (any campaign) ----
@admin_router.get("", response_model=CampaignPage)
def list_all_campaigns(
    scope_type: Optional[ScopeType] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("ADMIN")),
):
    items, total = CampaignRepository(db).find_all(
        scope_type=scope_type, search=search, page=page, page_size=page_size
    )
    return CampaignPage(items=items, total=total, page=page, page_size=page_size)

@admin_router.post("", response_model=CampaignOut, status_code=status.HTTP_201_CREATED)
def create_platform_campaign(
    payload: PlatformCampaignCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("ADMIN")),
):
    campaign = admin.create_platform_campaign(payload)
    _audit(db, request, current_user, "CAMPAIGN_CREATE", campaign.id, {"name": campaign.name, "scope": "platform"})
    return campaign

@admin_router.patch("/{campaign_id}", response_model=CampaignOut)
def update_any_campaign(
    campaign_id: int,
    payload: PlatformCampaignUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("ADMIN")),
):
    campaign = admin.update_campaign(campaign_id, payload)
    _audit(db, request, current_user, "CAMPAIGN_UPDATE", campaign_id,
           {"fields": sorted(payload.model_dump(exclude_unset=True))})
    return campaign

@admin_router.post("/{campaign_id}/toggle", response_model=CampaignOut)
def toggle_any_campaign(
    campaign_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("ADMIN")),
):
    campaign = admin.toggle_campaign(campaign_id)
    _audit(db, request, current_user, "CAMPAIGN_TOGGLE", campaign_id, {"is_active": campaign.is_active})
    return campaign

@admin_router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_any_campaign(
    campaign_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: CampaignAdmin = Depends(get_campaign_admin),
    current_user: User = Depends(role_required("ADMIN")),
):
    admin.delete_campaign(campaign_id)
    _audit(db, request, current_user, "CAMPAIGN_DELETE", campaign_id)
    return None
