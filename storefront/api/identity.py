# storefront/api/identity.py
"""
Access/identity context.

Token validation happens upstream (auth gateway); it forwards the
authenticated username in PRINCIPAL_HEADER. Here the principal is
resolved to a numeric user id, the client never sends a user id itself.
"""
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import StorageError
from storefront.repos.user_repo import UserRepo
from storefront.utils.settings import PRINCIPAL_HEADER


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str


def get_principal(request: Request) -> str:
    principal = request.headers.get(PRINCIPAL_HEADER)
    if not principal:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal


def get_identity(
    principal: str = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Identity:
    try:
        user = UserRepo(db).get_user_by_username(principal)
    except StorageError:
        raise HTTPException(status_code=500, detail="Oops... our bad.")

    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return Identity(user_id=user.id, username=user.username)
