from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlmodel import Session

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_user, reject_unsupported_methods
from canteen.core.exceptions.app_exception import NotFound
from canteen.database.connection import get_session
from canteen.models.user.user import User
from canteen.schemas.user.user import ProfileUpdate, UserResponse

db_session = get_session


class ProfileRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/user/profile", tags=["Profile"], *args, **kwargs)
        self.add_api_route("", self.get_profile, methods=["GET"])
        self.add_api_route("", self.update_profile, methods=["PUT"])
        reject_unsupported_methods(self, require_user)

    def _current(self, session: Session, user_id: str) -> User:
        user = session.get(User, user_id)
        if not user or user.is_deleted:
            raise NotFound("User not found")
        return user

    def get_profile(self, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        user = self._current(session, current_user.user_id)
        return {"success": True, "user": UserResponse.model_validate(user)}

    def update_profile(self, data: ProfileUpdate, current_user: Principal = Depends(require_user), session: Session = Depends(db_session)):
        user = self._current(session, current_user.user_id)

        if data.name:
            user.name = data.name
        if "phone_number" in data.model_fields_set:
            user.phone_number = data.phone_number

        user.updated_at = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        return {"success": True, "user": UserResponse.model_validate(user)}
