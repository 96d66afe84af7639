from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from agenda.database import get_session
from agenda.core.security import get_current_owner
from agenda.models.user import User
from agenda.services.reports import ReportService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary")
def dashboard_summary(
    start: date,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    """
    Resumo do período: atendimentos por status, receita/lucro dos
    concluídos, despesas por categoria, satisfação média e ocupação
    (esta só quando start == end).
    """
    if end is not None and end < start:
        raise HTTPException(status_code=400, detail="end deve ser maior ou igual a start")

    return ReportService(session).summary(current_owner.id, start, end)
