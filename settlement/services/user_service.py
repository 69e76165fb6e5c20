# settlement/services/user_service.py
from sqlalchemy.orm import Session

from settlement.data.models.user import UserModel
from settlement.domain.errors import NotFound, Unauthenticated
from settlement.domain.schemas import UserProfileIn, UserProfileOut
from settlement.repos.user_repo import UserRepo


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def save_profile(self, user_id: str | None, payload: UserProfileIn) -> UserProfileOut:
        if not user_id:
            raise Unauthenticated("Authentication required")

        user = self.repo.get_user(user_id) or UserModel(id=user_id)
        for field, value in payload.model_dump().items():
            setattr(user, field, value)

        saved = self.repo.save_user(user)
        return UserProfileOut.model_validate(saved)

    def get_profile(self, user_id: str | None) -> UserProfileOut:
        if not user_id:
            raise Unauthenticated("Authentication required")
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("Profile not found")
        return UserProfileOut.model_validate(user)
