from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from liftlog.db.database import Base
from liftlog.models.base import ShellProgramMixin, new_id


class CardioProgram(ShellProgramMixin, Base):
    __tablename__ = "cardio_programs"

    weeks = relationship(
        "CardioWeek",
        back_populates="cardio_program",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CardioWeek.week_number",
    )

    def __repr__(self):
        return f"<CardioProgram(id={self.id}, user_id={self.user_id}, copy_status={self.copy_status})>"


class CardioWeek(Base):
    __tablename__ = "cardio_weeks"

    id = Column(String(36), primary_key=True, default=new_id)
    week_number = Column(Integer, nullable=False)
    cardio_program_id = Column(
        String(36), ForeignKey("cardio_programs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    cardio_program = relationship("CardioProgram", back_populates="weeks")
    sessions = relationship(
        "CardioSession",
        back_populates="cardio_week",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CardioSession.day_number",
    )

    __table_args__ = (
        UniqueConstraint("cardio_program_id", "week_number", name="uq_cardio_week_program_week_number"),
    )


class CardioSession(Base):
    __tablename__ = "cardio_sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    day_number = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    target_duration = Column(Integer, nullable=False)  # minutes
    intensity_zone = Column(String(50), nullable=True)
    equipment = Column(String(100), nullable=True)
    target_hr_range = Column(String(50), nullable=True)
    target_power_range = Column(String(50), nullable=True)
    interval_structure = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    cardio_week_id = Column(
        String(36), ForeignKey("cardio_weeks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(64), nullable=False)

    cardio_week = relationship("CardioWeek", back_populates="sessions")
