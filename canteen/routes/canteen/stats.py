from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from canteen.auth.credentials import Principal
from canteen.auth.gate import require_canteen, reject_unsupported_methods
from canteen.database.connection import get_session
from canteen.helpers.order.stats import summarize_orders
from canteen.models.order.order import Order

db_session = get_session

SALES_GRAPH_DAYS = 7


class CanteenStatsRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(prefix="/api/canteen", tags=["Canteen"], *args, **kwargs)
        self.add_api_route("/stats", self.get_stats, methods=["GET"])
        reject_unsupported_methods(self, require_canteen)

    def get_stats(self, current_user: Principal = Depends(require_canteen), session: Session = Depends(db_session)):
        orders = session.exec(select(Order)).all()
        return {"success": True, "stats": summarize_orders(list(orders), SALES_GRAPH_DAYS)}
