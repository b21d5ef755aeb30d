# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from models.users import User
import schemas.product as product_schemas
from schemas.order import MessageResponse
from services.errors import NotFoundError
from services.farmers import FarmerService
from services.products import ProductService
from utils.audit import write_log, client_ip
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/products", tags=["Products"])

# ---- HELPERS ----
def _product_to_out(product: Product) -> product_schemas.ProductResponse:
    farmer = product.farmer
    out = product_schemas.ProductResponse.model_validate(product)
    out.farmer_name = farmer.user.full_name if farmer and farmer.user else None
    out.farmer_location = farmer.location if farmer else None
    return out

def _farmer_id(db: Session, user: User) -> int:
    farmer = FarmerService(db).get_by_user_id(user.id)
    if not farmer:
        raise NotFoundError("Farmer profile not found")
    return farmer.id


# =========================
# PUBLIC CATALOG
# =========================
@router.get("", response_model=List[product_schemas.ProductResponse])
def list_products(db: Session = Depends(get_db)):
    return [_product_to_out(p) for p in ProductService(db).get_all_products()]


@router.get("/search", response_model=List[product_schemas.ProductResponse])
def search_products(
    q: str = Query("", description="Match against name, description or category"),
    category: Optional[str] = Query(None, description="Exact category"),
    db: Session = Depends(get_db),
):
    return [_product_to_out(p) for p in ProductService(db).search_products(q, category)]


# =========================
# FARMER LISTINGS
# =========================
@router.get("/my/products", response_model=List[product_schemas.ProductResponse])
def my_products(db: Session = Depends(get_db), current_user: User = Depends(role_required("farmer"))):
    farmer_id = _farmer_id(db, current_user)
    return [_product_to_out(p) for p in ProductService(db).get_products_by_farmer(farmer_id)]


@router.get("/{product_id}", response_model=product_schemas.ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _product_to_out(ProductService(db).get_product_by_id(product_id))


@router.post("", response_model=product_schemas.ProductCreated, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("farmer")),
):
    farmer_id = _farmer_id(db, current_user)
    product = ProductService(db).create_product(farmer_id, payload.model_dump())
    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        resource_id=product.id, ip=client_ip(request), meta={"name": product.name},
    )
    return {"productId": product.id, "message": "Product created successfully"}


@router.put("/{product_id}", response_model=MessageResponse)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("farmer", "admin")),
):
    data = payload.model_dump(exclude_unset=True)
    result = ProductService(db).update_product(product_id, data, user=current_user)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        resource_id=product_id, ip=client_ip(request), meta={"fields": sorted(data)},
    )
    return result


# Soft delete: the listing disappears from the catalog, order history keeps it
@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("farmer", "admin")),
):
    result = ProductService(db).delete_product(product_id, user=current_user)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
        resource_id=product_id, ip=client_ip(request),
    )
    return result
