from collections import Counter, defaultdict
from datetime import date
from typing import Dict, Optional

from sqlmodel import Session, select

from agenda.domain.status import AppointmentStatus, is_blocking
from agenda.domain.timeutils import to_minutes
from agenda.models.cost import Cost
from agenda.repositories import AppointmentRepository, store_guard

TOP_SERVICES = 5


class ReportService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = AppointmentRepository(session)

    def summary(self, business_id: int, start: date, end: Optional[date] = None) -> Dict:
        end = end or start

        with store_guard(self.session):
            appts = self.repo.list_appointments(business_id, start, end)
            costs = self.session.exec(
                select(Cost).where(
                    Cost.owner_id == business_id,
                    Cost.date >= start,
                    Cost.date <= end,
                )
            ).all()
            biz = self.repo.get_settings(business_id)

        by_status = Counter(a.status for a in appts)

        # receita e lucro: só completed
        completed = [a for a in appts if a.status == AppointmentStatus.COMPLETED.value]
        revenue = sum(float(a.value or 0) for a in completed)
        service_costs = sum(float(a.cost or 0) for a in completed)
        minutes_completed = sum(to_minutes(a.end_time) - to_minutes(a.start_time) for a in completed)

        expenses: Dict[str, float] = defaultdict(float)
        for c in costs:
            expenses[c.category] += float(c.value)
        total_expenses = sum(expenses.values())

        scores = [a.satisfaction_score for a in completed if a.satisfaction_score is not None]
        average_score = round(sum(scores) / len(scores), 2) if scores else None

        payment_methods = Counter(a.payment_method for a in completed if a.payment_method)

        # top serviços por quantidade e por lucro
        stats: Dict[str, Dict] = {}
        for a in completed:
            s = stats.setdefault(a.service_name_snapshot, {"name": a.service_name_snapshot, "count": 0, "revenue": 0.0, "profit": 0.0})
            s["count"] += 1
            s["revenue"] += float(a.value or 0)
            s["profit"] += float(a.value or 0) - float(a.cost or 0)

        top_by_count = sorted(stats.values(), key=lambda s: (-s["count"], s["name"]))[:TOP_SERVICES]
        top_by_profit = sorted(stats.values(), key=lambda s: (-s["profit"], s["name"]))[:TOP_SERVICES]

        # ocupação: só faz sentido para um único dia
        capacity_minutes = None
        occupancy = None
        if start == end and biz is not None:
            hours = biz.business_hours()
            if hours.is_open_on(start) and hours.open_minute < hours.close_minute:
                capacity_minutes = hours.close_minute - hours.open_minute
                booked = sum(
                    to_minutes(a.end_time) - to_minutes(a.start_time)
                    for a in appts
                    if is_blocking(a.status) or a.status == AppointmentStatus.COMPLETED.value
                )
                occupancy = round((booked / capacity_minutes) * 100, 2)

        profit = revenue - service_costs

        return {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "total_appointments": len(appts),
            "status": dict(by_status),
            "revenue_completed": round(revenue, 2),
            "service_costs": round(service_costs, 2),
            "gross_profit": round(profit, 2),
            "expenses": {k: round(v, 2) for k, v in expenses.items()},
            "total_expenses": round(total_expenses, 2),
            "net_result": round(profit - total_expenses, 2),
            "minutes_completed": minutes_completed,
            "average_satisfaction": average_score,
            "payment_methods": dict(payment_methods),
            "top_services": [_rounded(s) for s in top_by_count],
            "most_profitable_services": [_rounded(s) for s in top_by_profit],
            "capacity_minutes": capacity_minutes,
            "occupancy_percent": occupancy,
        }


def _rounded(stat: Dict) -> Dict:
    return {**stat, "revenue": round(stat["revenue"], 2), "profit": round(stat["profit"], 2)}
