# api/self_registration/registration_tokens_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from config.database import Base


class RegistrationToken(Base):
    __tablename__ = "registration_tokens"

    id         = Column(Integer, primary_key=True, index=True)
    token      = Column(String(64), unique=True, nullable=False, index=True)
    label      = Column(String(150), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    max_uses   = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    is_active  = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("members.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
