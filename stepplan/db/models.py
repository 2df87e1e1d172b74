"""
Database table definitions and it stores:
- Plan traces (one row per planning call made by the routing layer)

Main purpose:
Tell true planner failures apart from confident single-step answers
when looking back at traffic.
"""



from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional
from stepplan.db.base import Base

class PlanTrace(Base):
    __tablename__ = "plan_traces"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    chat_id: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    request_text: Mapped[str] = mapped_column(Text)
    outcome: Mapped[str] = mapped_column(String)  # multi_step|single_step|fallback
    fallback_reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    step_count: Mapped[int] = mapped_column(Integer, default=0)
    tools: Mapped[str] = mapped_column(Text, default="[]")  # JSON list of tool names
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
