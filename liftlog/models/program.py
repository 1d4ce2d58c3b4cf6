from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from liftlog.db.database import Base
from liftlog.models.base import ShellProgramMixin, new_id


class Program(ShellProgramMixin, Base):
    __tablename__ = "programs"

    weeks = relationship(
        "Week",
        back_populates="program",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Week.week_number",
    )

    def __repr__(self):
        return f"<Program(id={self.id}, user_id={self.user_id}, copy_status={self.copy_status})>"


class Week(Base):
    __tablename__ = "weeks"

    id = Column(String(36), primary_key=True, default=new_id)
    week_number = Column(Integer, nullable=False)
    program_id = Column(String(36), ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    program = relationship("Program", back_populates="weeks")
    workouts = relationship(
        "Workout",
        back_populates="week",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Workout.day_number",
    )

    # One subtree per week number; duplicate deliveries collide here
    __table_args__ = (
        UniqueConstraint("program_id", "week_number", name="uq_week_program_week_number"),
    )


class Workout(Base):
    __tablename__ = "workouts"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    day_number = Column(Integer, nullable=False)
    week_id = Column(String(36), ForeignKey("weeks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)

    week = relationship("Week", back_populates="workouts")
    exercises = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Exercise.order",
    )


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    exercise_definition_id = Column(
        String(36), ForeignKey("exercise_definitions.id"), nullable=False, index=True
    )
    order = Column(Integer, nullable=False)
    exercise_group = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    workout_id = Column(String(36), ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)

    workout = relationship("Workout", back_populates="exercises")
    definition = relationship("ExerciseDefinition")
    prescribed_sets = relationship(
        "PrescribedSet",
        back_populates="exercise",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PrescribedSet.set_number",
    )


class PrescribedSet(Base):
    __tablename__ = "prescribed_sets"

    id = Column(String(36), primary_key=True, default=new_id)
    set_number = Column(Integer, nullable=False)
    reps = Column(String(20), nullable=False)  # "8", "8-12", "AMRAP"
    weight = Column(String(50), nullable=True)
    rpe = Column(Float, nullable=True)
    rir = Column(Integer, nullable=True)
    exercise_id = Column(String(36), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)

    exercise = relationship("Exercise", back_populates="prescribed_sets")


class ExerciseDefinition(Base):
    __tablename__ = "exercise_definitions"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    normalized_name = Column(String(200), nullable=False, index=True)
    is_system = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(64), nullable=True)  # NULL for catalog entries
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    aliases = relationship(
        "ExerciseAlias",
        back_populates="definition",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("normalized_name", "created_by", name="uq_exercise_definition_owner_name"),
    )


class ExerciseAlias(Base):
    __tablename__ = "exercise_aliases"

    id = Column(String(36), primary_key=True, default=new_id)
    exercise_definition_id = Column(
        String(36), ForeignKey("exercise_definitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    alias = Column(String(200), nullable=False, unique=True)  # normalized

    definition = relationship("ExerciseDefinition", back_populates="aliases")
