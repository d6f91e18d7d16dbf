"""
Products API routes.

Office users can browse the catalogue; only admins edit it.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from purifier.api.dependencies import get_db, require_admin, require_office
from purifier.models.products import ProductStatus
from purifier.services.product_service import ProductService


# Pydantic schemas
class ProductResponse(BaseModel):
    id: UUID
    custom_id: str
    name: str
    model: str
    description: str
    price: float
    status: ProductStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    model: str = Field("", max_length=255)
    description: str = Field("", max_length=2000)
    price: Decimal = Field(..., gt=0, decimal_places=2, description="Unit price in INR")
    status: ProductStatus = ProductStatus.ACTIVE


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    status: Optional[ProductStatus] = None


# Router
router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductResponse], dependencies=[Depends(require_office)])
def list_products(
    status_filter: Optional[ProductStatus] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
):
    """List products, newest first."""
    return ProductService(db).list_products(status=status_filter)


@router.get("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_office)])
def get_product(product_id: UUID, db: Session = Depends(get_db)):
    return ProductService(db).get_product(product_id)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create_product(**payload.model_dump())


@router.patch("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def update_product(product_id: UUID, payload: ProductUpdate, db: Session = Depends(get_db)):
    return ProductService(db).update_product(product_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(product_id: UUID, db: Session = Depends(get_db)):
    """Delete a product that no order or service references (409 otherwise)."""
    ProductService(db).delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
