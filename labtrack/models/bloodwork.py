from datetime import date, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, BIGINT, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labtrack.database import Base


class BloodworkReport(Base):
    __tablename__ = "bloodwork_reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    report_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    raw_json: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    lab_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    other_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="bloodwork_reports")


class BloodworkHistoryAnalysis(Base):
    __tablename__ = "bloodwork_history_analyses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    trend_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    pattern_notes: Mapped[list | None] = mapped_column(JSON, nullable=True)
    marker_insights: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    user = relationship("User", back_populates="history_analyses")


class TokenUsageLog(Base):
    __tablename__ = "token_usage_log"

    id: Mapped[int] = mapped_column(BIGINT().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    feature_name: Mapped[str] = mapped_column(String(100), nullable=False)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
