"""
Tenant management routes.

There is no update or delete path; tenants are created once.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shop_insights.api.schemas import TenantCreate, TenantResponse
from shop_insights.database.connection import get_db
from shop_insights.database.models import Tenant
from shop_insights.utils.exceptions import ValidationError
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=List[TenantResponse])
async def list_tenants(db: Session = Depends(get_db)):
    """List all tenants ordered by id."""
    try:
        tenants = db.query(Tenant).order_by(Tenant.id.asc()).all()
        return [tenant.to_dict() for tenant in tenants]
    except Exception as e:
        logger.error(f"GET /api/tenants error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tenants"
        )


@router.post("", response_model=TenantResponse)
async def create_tenant(data: TenantCreate, db: Session = Depends(get_db)):
    """
    Create a tenant.

    name, shopUrl and accessToken are all required and must be non-blank.
    """
    name = (data.name or "").strip()
    shop_url = (data.shopUrl or "").strip()
    access_token = (data.accessToken or "").strip()

    if not name or not shop_url or not access_token:
        raise ValidationError("name, shopUrl and accessToken are required")

    try:
        tenant = Tenant(name=name, shop_url=shop_url, access_token=access_token)
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
    except Exception as e:
        db.rollback()
        logger.error(f"POST /api/tenants error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create tenant"
        )

    logger.info(f"Tenant created: {tenant.id} ({tenant.name})")
    return tenant.to_dict()
