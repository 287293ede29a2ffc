# api/email_queue/email_queue_model.py
from sqlalchemy import Column, Integer, String, Text, Enum, DateTime, func
from config.database import Base
import enum


class EmailStatus(enum.Enum):
    pending    = 'PENDING'
    processing = 'PROCESSING'
    completed  = 'COMPLETED'
    failed     = 'FAILED'


class EmailQueue(Base):
    __tablename__ = "email_queue"

    id           = Column(Integer, primary_key=True, index=True)
    email        = Column(String(255), nullable=False)
    subject      = Column(String(255), nullable=False)
    html         = Column(Text, nullable=True)
    text         = Column(Text, nullable=False)
    status       = Column(Enum(EmailStatus), nullable=False, default=EmailStatus.pending, index=True)
    attempts     = Column(Integer, nullable=False, default=0)
    last_attempt = Column(DateTime(timezone=True), nullable=True)
    error        = Column(Text, nullable=True)
    created_at   = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
