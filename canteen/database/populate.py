import logging
from typing import Optional
import bcrypt
from sqlmodel import Session, select

from canteen.configuration.settings import Configuration
from canteen.enums.user_role import UserRole
from canteen.models.user.user import User


def populate_database(session: Session, configuration: Configuration):
    """Seeds the data the platform cannot run without."""
    populate_admin_user(session, configuration)


def populate_admin_user(session: Session, configuration: Configuration) -> Optional[User]:
    """Creates the first admin account, if configured and not present yet."""
    existing_admin = session.exec(select(User).where(User.role == UserRole.ADMIN)).first()
    if existing_admin:
        return existing_admin

    if not (configuration.admin_email and configuration.admin_password):
        logging.warning("DATABASE >>> No admin account exists and ADMIN_EMAIL/ADMIN_PASSWORD are not set")
        return None

    email = configuration.admin_email.strip().lower()
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        user.role = UserRole.ADMIN
    else:
        password_hash = bcrypt.hashpw(
            configuration.admin_password.encode("utf-8"), bcrypt.gensalt(rounds=configuration.bcrypt_rounds)
        ).decode("utf-8")
        user = User(
            name=configuration.admin_name,
            email=email,
            password_hash=password_hash,
            role=UserRole.ADMIN,
            wallet_balance=0.0,
        )

    session.add(user)
    session.commit()
    session.refresh(user)
    logging.info(f"DATABASE >>> Admin account ready: {email}")
    return user
