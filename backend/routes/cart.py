# backend/routes/cart.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.cart import CartItem
from models.users import User
from schemas.cart import CartAddItem, CartUpdateItem, CartItemOut, CartTotal
from schemas.order import MessageResponse
from services.buyers import BuyerService
from services.cart import CartService
from services.errors import NotFoundError
from utils.audit import write_log, client_ip
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/cart", tags=["Cart"])

# Every cart endpoint acts on the authenticated buyer's own cart
buyer_only = role_required("buyer")


def _buyer_id(db: Session, user: User) -> int:
    buyer = BuyerService(db).get_by_user_id(user.id)
    if not buyer:
        raise NotFoundError("Buyer profile not found")
    return buyer.id


def _line_to_out(item: CartItem) -> CartItemOut:
    product = item.product
    farmer = product.farmer
    return CartItemOut(
        cart_id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        added_at=item.added_at,
        name=product.name,
        description=product.description,
        price=product.price,
        unit=product.unit,
        image_url=product.image_url,
        farmer_id=product.farmer_id,
        farmer_name=farmer.user.full_name if farmer and farmer.user else None,
        farmer_location=farmer.location if farmer else None,
        line_total=round(product.price * item.quantity, 2), # Live price, not a snapshot
    )


@router.get("", response_model=List[CartItemOut])
def get_cart(db: Session = Depends(get_db), current_user: User = Depends(buyer_only)):
    buyer_id = _buyer_id(db, current_user)
    return [_line_to_out(item) for item in CartService(db).get_cart(buyer_id)]


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    buyer_id = _buyer_id(db, current_user)
    result = CartService(db).add_to_cart(buyer_id, payload.product_id, payload.quantity)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        ip=client_ip(request),
        meta={"product_id": payload.product_id, "quantity": payload.quantity},
    )
    return result


@router.put("", response_model=MessageResponse)
def update_cart_item(
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    buyer_id = _buyer_id(db, current_user)
    result = CartService(db).update_cart_item(buyer_id, payload.product_id, payload.quantity)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_UPDATE",
        resource="cart",
        ip=client_ip(request),
        meta={"product_id": payload.product_id, "quantity": payload.quantity},
    )
    return result


@router.get("/total", response_model=CartTotal)
def get_cart_total(db: Session = Depends(get_db), current_user: User = Depends(buyer_only)):
    buyer_id = _buyer_id(db, current_user)
    return {"total": CartService(db).get_cart_total(buyer_id)}


@router.delete("/{product_id}", response_model=MessageResponse)
def remove_from_cart(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    buyer_id = _buyer_id(db, current_user)
    result = CartService(db).remove_from_cart(buyer_id, product_id)
    write_log(db, user_id=current_user.id, action="CART_DELETE", resource="cart",
              ip=client_ip(request), meta={"product_id": product_id})
    return result


@router.delete("", response_model=MessageResponse)
def clear_cart(request: Request, db: Session = Depends(get_db), current_user: User = Depends(buyer_only)):
    buyer_id = _buyer_id(db, current_user)
    result = CartService(db).clear_cart(buyer_id)
    write_log(db, user_id=current_user.id, action="CART_CLEAR", resource="cart", ip=client_ip(request))
    return result
