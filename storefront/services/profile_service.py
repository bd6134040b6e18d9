from sqlalchemy.orm import Session

from storefront.data.models.profile import ProfileModel
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import ProfileIn
from storefront.repos.profile_repo import ProfileRepo


class ProfileService:
    def __init__(self, db: Session):
        self.repo = ProfileRepo(db)

    def get_profile(self, user_id: int) -> ProfileModel:
        profile = self.repo.get_profile(user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def update_profile(self, user_id: int, payload: ProfileIn) -> ProfileModel:
        return self.repo.upsert_profile(user_id, payload.model_dump())
