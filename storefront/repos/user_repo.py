from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.repos.base import storage_call

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    @storage_call
    def get_user_by_username(self, username: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.username == username)
        ).scalar_one_or_none()
