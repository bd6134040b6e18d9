from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.identity import Identity, get_identity
from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError, StorageError
from storefront.domain.schemas import ProfileIn, ProfileOut
from storefront.services.profile_service import ProfileService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileOut)
def get_profile(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    service = ProfileService(db)
    try:
        return service.get_profile(identity.user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")


@router.put("", response_model=ProfileOut)
def update_profile(
    payload: ProfileIn,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    service = ProfileService(db)
    try:
        return service.update_profile(identity.user_id, payload)
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")
