from sqlalchemy.orm import Session

from storefront.data.models.profile import ProfileModel
from storefront.repos.base import storage_call


class ProfileRepo:
    def __init__(self, db: Session):
        self.db = db

    @storage_call
    def get_profile(self, user_id: int) -> ProfileModel | None:
        return self.db.get(ProfileModel, user_id)

    @storage_call
    def upsert_profile(self, user_id: int, values: dict) -> ProfileModel:
        profile = self.db.get(ProfileModel, user_id)
        if profile is None:
            profile = ProfileModel(user_id=user_id)
            self.db.add(profile)
        for key, value in values.items():
            setattr(profile, key, value)
        self.db.commit()
        self.db.refresh(profile)
        return profile
