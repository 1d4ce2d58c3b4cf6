"""Columns shared by strength and cardio shell programs."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text


def new_id() -> str:
    return str(uuid.uuid4())


class ShellProgramMixin:
    """Program row the clone worker fills in week by week.

    ``copy_status`` follows the grammar in ``liftlog.core.copy_status``;
    ``copy_status_updated_at`` is the heartbeat the poller ages jobs by.
    """

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=False, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(DateTime, nullable=True)

    copy_status = Column(String(64), nullable=True)
    copy_status_updated_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
