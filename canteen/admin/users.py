from datetime import datetime, timezone
import logging
import math
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import get_gate, require_admin, reject_unsupported_methods
from canteen.core.exceptions.app_exception import NotFound, ValidationError
from canteen.database.connection import get_session
from canteen.enums.user_role import UserRole
from canteen.models.user.user import User
from canteen.schemas.user.user import ASSIGNABLE_ROLES, UserCreate, UserResponse, UserUpdate

db_session = get_session


class AdminUserRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/admin/users", tags=["Admin"], *args, **kwargs)
        self.add_api_route("", self.get_all_users, methods=["GET"])
        self.add_api_route("", self.create_user, methods=["POST"])
        self.add_api_route("/{user_id}", self.get_user_by_id, methods=["GET"])
        self.add_api_route("/{user_id}", self.update_user_by_id, methods=["PUT"])
        self.add_api_route("/{user_id}", self.delete_user_by_id, methods=["DELETE"])
        reject_unsupported_methods(self, require_admin)

    def _active_user(self, session: Session, user_id: str) -> User:
        user = session.get(User, user_id)
        if not user or user.is_deleted:
            raise NotFound("User not found")
        return user

    def _commit_unique_email(self, session: Session) -> None:
        try:
            session.commit()
        except IntegrityError:
            # Another request took the email between the lookup and the write.
            session.rollback()
            raise ValidationError("User already exists")

    def get_all_users(
        self,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        role: Optional[str] = Query(default=None),
        current_user: Principal = Depends(require_admin),
        session: Session = Depends(db_session),
    ):
        filters = [User.deleted_at == None]
        if role:
            if role not in [r.value for r in UserRole]:
                raise ValidationError("Invalid role")
            filters.append(User.role == UserRole(role))

        total = session.exec(select(func.count()).select_from(User).where(*filters)).one()
        users = session.exec(
            select(User)
            .where(*filters)
            .order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()

        return {
            "success": True,
            "users": [UserResponse.model_validate(user) for user in users],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    def create_user(
        self,
        user_data: UserCreate,
        request: Request,
        current_user: Principal = Depends(require_admin),
        session: Session = Depends(db_session),
    ):
        existing_user = session.exec(select(User).where(User.email == user_data.email)).first()
        if existing_user:
            raise ValidationError("User already exists")

        db_user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=get_gate(request).codec.hash_password(user_data.password),
            role=UserRole(user_data.role),
            phone_number=user_data.phone_number,
            wallet_balance=0.0,
        )
        session.add(db_user)
        self._commit_unique_email(session)
        session.refresh(db_user)
        logging.info(f"ADMIN >>> {current_user.email} created {db_user.role.value} account {db_user.email}")

        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"success": True, "user": UserResponse.model_validate(db_user).model_dump(mode="json")},
        )

    def get_user_by_id(self, user_id: str, current_user: Principal = Depends(require_admin), session: Session = Depends(db_session)):
        user = self._active_user(session, user_id)
        return {"success": True, "user": UserResponse.model_validate(user)}

    def update_user_by_id(
        self,
        user_id: str,
        user_data: UserUpdate,
        current_user: Principal = Depends(require_admin),
        session: Session = Depends(db_session),
    ):
        db_user = self._active_user(session, user_id)

        # Wallet balance is never editable here.
        if user_data.name:
            db_user.name = user_data.name
        if user_data.email:
            email = user_data.email.strip().lower()
            if email != db_user.email and session.exec(select(User).where(User.email == email)).first():
                raise ValidationError("User already exists")
            db_user.email = email
        if "phone_number" in user_data.model_fields_set:
            db_user.phone_number = user_data.phone_number
        if user_data.role and user_data.role in [role.value for role in ASSIGNABLE_ROLES]:
            db_user.role = UserRole(user_data.role)

        db_user.updated_at = datetime.now(timezone.utc)
        session.add(db_user)
        self._commit_unique_email(session)
        session.refresh(db_user)
        return {"success": True, "user": UserResponse.model_validate(db_user)}

    def delete_user_by_id(self, user_id: str, current_user: Principal = Depends(require_admin), session: Session = Depends(db_session)):
        db_user = self._active_user(session, user_id)

        email = db_user.email
        db_user.soft_delete()
        session.add(db_user)
        session.commit()
        logging.info(f"ADMIN >>> {current_user.email} deleted account {email}")
        return {"success": True, "message": "User deleted"}
