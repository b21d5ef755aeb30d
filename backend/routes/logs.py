# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import date, datetime, time
from pydantic import BaseModel

from database import get_db
from models.log import Log
from models.users import User
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/logs", tags=["Logs"])

# --- SCHEMAS ---
class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    resource_id: Optional[int] = None
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None

    class Config:
        from_attributes = True

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

# --- ENDPOINT ---
# Audit trail (Admin only), newest first
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action, e.g. ORDER_CREATE"),
    user_id: Optional[int] = Query(None, description="Filter by acting user"),
    resource: Optional[str] = Query(None, description="Filter by resource, e.g. payments"),
    resource_id: Optional[int] = Query(None, description="Filter by resource id"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    date_from: Optional[date] = Query(None, description="From day (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="To day inclusive (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action == action.upper())
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource == resource)
    if resource_id is not None:
        query = query.filter(Log.resource_id == resource_id)
    if status:
        query = query.filter(Log.status == status.upper())

    # Whole days: from 00:00 of date_from to the end of date_to
    if date_from:
        query = query.filter(Log.ts >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.filter(Log.ts <= datetime.combine(date_to, time.max))

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
