#storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.dependencies import get_lock_service
from storefront.api.identity import Identity, get_identity
from storefront.data.database import get_db
from storefront.domain.errors import ConflictError, NotFoundError, StorageError
from storefront.domain.schemas import CartItemUpdate, CartOut
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session, lock_service: LockService):
    return CartService(db=db, lock_service=lock_service)


@router.get("", response_model=CartOut)
def get_cart(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return CartOut.from_cart(svc.get_cart(identity.user_id))
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")


@router.post("/products/{product_id}", response_model=CartOut, status_code=201)
def add_product(
    product_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return CartOut.from_cart(svc.add_item(identity.user_id, product_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")


@router.put("/products/{product_id}", response_model=CartOut)
def update_product(
    product_id: int,
    payload: CartItemUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        cart = svc.update_item(
            user_id=identity.user_id,
            product_id=product_id,
            quantity=payload.quantity,
            discount_percent=payload.discount_percent,
        )
        return CartOut.from_cart(cart)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("", response_model=CartOut)
def clear_cart(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return CartOut.from_cart(svc.clear(identity.user_id))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")
