import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import get_gate
from canteen.core.exceptions.app_exception import Unauthorized, ValidationError
from canteen.database.connection import get_session
from canteen.enums.user_role import UserRole
from canteen.models.user.user import User
from canteen.schemas.auth.auth import AuthRequest, AuthUser

db_session = get_session


class AuthRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/user", tags=["Auth"], *args, **kwargs)
        self.add_api_route("/auth", self.authenticate, methods=["POST"])

    def _token_for(self, request: Request, user: User) -> str:
        principal = Principal(user_id=user.id, email=user.email, role=user.role)
        return get_gate(request).codec.issue_token(principal)

    def authenticate(self, data: AuthRequest, request: Request, session: Session = Depends(db_session)):
        if data.action == "signup":
            return self.signup(data, request, session)
        if data.action == "login":
            return self.login(data, request, session)
        raise ValidationError("Invalid action")

    def signup(self, data: AuthRequest, request: Request, session: Session):
        if not data.name:
            raise ValidationError("Name is required for signup")

        existing_user = session.exec(select(User).where(User.email == data.email)).first()
        if existing_user:
            raise ValidationError("User already exists")

        user = User(
            name=data.name,
            email=data.email,
            password_hash=get_gate(request).codec.hash_password(data.password),
            role=UserRole.USER,
            wallet_balance=0.0,
        )
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            # Concurrent signup with the same email.
            session.rollback()
            raise ValidationError("User already exists")
        session.refresh(user)
        logging.info(f"AUTH >>> New user signed up: {user.email}")

        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={
                "success": True,
                "token": self._token_for(request, user),
                "user": AuthUser.model_validate(user).model_dump(mode="json", exclude={"phone_number"}),
            },
        )

    def login(self, data: AuthRequest, request: Request, session: Session):
        user = session.exec(select(User).where(User.email == data.email)).first()
        if not user or user.is_deleted:
            raise Unauthorized("Invalid credentials")

        if not get_gate(request).codec.verify_password(data.password, user.password_hash):
            logging.info(f"AUTH >>> Failed login for {data.email}")
            raise Unauthorized("Invalid credentials")

        return {
            "success": True,
            "token": self._token_for(request, user),
            "user": AuthUser.model_validate(user),
        }
