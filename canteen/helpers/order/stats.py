from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from canteen.core.utils.datetime_utils import as_utc
from canteen.enums.order_status import OrderStatus
from canteen.models.order.order import Order


def _order_day(order: Order) -> date:
    return as_utc(order.created_at).date()


def sales_graph(orders: Iterable[Order], days: int, today: Optional[date] = None) -> List[Dict]:
    """Completed orders and revenue per day, oldest day first."""
    today = today or datetime.now(timezone.utc).date()
    per_day: Dict[date, List[Order]] = {}
    for order in orders:
        if order.status == OrderStatus.COMPLETED:
            per_day.setdefault(_order_day(order), []).append(order)

    graph = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_orders = per_day.get(day, [])
        graph.append({
            "date": day.isoformat(),
            "orders": len(day_orders),
            "revenue": sum(order.total_amount for order in day_orders),
        })
    return graph


def summarize_orders(orders: List[Order], graph_days: int, today: Optional[date] = None) -> Dict:
    today = today or datetime.now(timezone.utc).date()

    stats: Dict = {"total_orders": len(orders)}
    for status in OrderStatus:
        stats[status.value] = sum(1 for order in orders if order.status == status)

    stats["total_revenue"] = sum(order.total_amount for order in orders if order.status == OrderStatus.COMPLETED)
    stats["today_orders"] = sum(1 for order in orders if _order_day(order) == today)
    stats["sales_graph"] = sales_graph(orders, graph_days, today)
    return stats
