from datetime import datetime, timezone
from sqlmodel import Session, update

from canteen.models.user.user import User


def debit_wallet(session: Session, user_id: str, amount: float) -> bool:
    """Deducts ``amount`` only if the balance covers it, in one statement."""
    result = session.exec(
        update(User)
        .where(User.id == user_id, User.wallet_balance >= amount)
        .values(wallet_balance=User.wallet_balance - amount, updated_at=datetime.now(timezone.utc))
    )
    return result.rowcount == 1


def credit_wallet(session: Session, user_id: str, amount: float) -> None:
    session.exec(
        update(User)
        .where(User.id == user_id)
        .values(wallet_balance=User.wallet_balance + amount, updated_at=datetime.now(timezone.utc))
    )
