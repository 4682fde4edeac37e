from fastapi import APIRouter, Depends
from sqlmodel import Session, func, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_admin, reject_unsupported_methods
from canteen.database.connection import get_session
from canteen.enums.user_role import UserRole
from canteen.helpers.order.stats import summarize_orders
from canteen.models.order.order import Order
from canteen.models.product.product import Product
from canteen.models.user.user import User

db_session = get_session

SALES_GRAPH_DAYS = 30


class AdminDashboardRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/admin", tags=["Admin"], *args, **kwargs)
        self.add_api_route("/dashboard", self.get_dashboard, methods=["GET"])
        reject_unsupported_methods(self, require_admin)

    def get_dashboard(self, current_user: Principal = Depends(require_admin), session: Session = Depends(db_session)):
        orders = list(session.exec(select(Order)).all())

        role_counts = dict(
            session.exec(
                select(User.role, func.count()).where(User.deleted_at == None).group_by(User.role)
            ).all()
        )
        total_products = session.exec(select(func.count()).select_from(Product)).one()

        stats = {
            "total_users": sum(role_counts.values()),
            "total_products": total_products,
        }
        stats.update(summarize_orders(orders, SALES_GRAPH_DAYS))
        stats["user_roles"] = {
            "users": role_counts.get(UserRole.USER, 0),
            "canteen": role_counts.get(UserRole.CANTEEN, 0),
            "admin": role_counts.get(UserRole.ADMIN, 0),
        }
        return {"success": True, "stats": stats}
