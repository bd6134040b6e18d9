# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.dependencies import get_lock_service
from storefront.api.identity import Identity, get_identity
from storefront.data.database import get_db
from storefront.domain.errors import (
    ConflictError,
    PreconditionError,
    StorageError,
)
from storefront.domain.schemas import OrderOut
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, lock_service: LockService):
    return OrderService(db=db, lock_service=lock_service)


@router.post("", response_model=OrderOut, status_code=201)
def checkout(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Checkout: zamowienie z koszyka zalogowanego usera.
    """
    svc = get_service(db, lock_service)
    try:
        return svc.checkout(identity.user_id)
    except PreconditionError as e:
        # brak profilu albo pusty koszyk
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Server not connected.")


@router.get("", response_model=List[OrderOut])
@router.get("/view", response_model=List[OrderOut])
def get_orders(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Zamowienia zalogowanego usera.
    """
    svc = get_service(db, lock_service)
    try:
        return svc.get_orders(identity.user_id)
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")
