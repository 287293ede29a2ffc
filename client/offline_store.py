# client/offline_store.py
"""
Local SQLite store for check-ins captured while offline.

roster      one row per member, the last roster downloaded for an event
sync_queue  check-ins waiting to be replayed, in capture order

SQLite keeps no UTC offset, so queued timestamps are stored as UTC and read
back as UTC.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

OfflineBase = declarative_base()

DEFAULT_STORE_URL = "sqlite:///fellowship_offline.db"

# values accepted by the server's AttendanceMethod
ATTENDANCE_METHODS = ("QR", "FELLOWSHIP_NUMBER", "MANUAL")


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RosterMember(OfflineBase):
    __tablename__ = "roster"

    id                = Column(Integer, primary_key=True, autoincrement=False)   # member id
    event_id          = Column(Integer, nullable=False, index=True)
    full_name         = Column(String(150), nullable=False)
    fellowship_number = Column(String(6), nullable=False, index=True)
    phone_number      = Column(String(30), nullable=True)
    qr_code           = Column(String(64), nullable=False, index=True)
    region_name       = Column(String(100), nullable=True)


class SyncQueueRecord(OfflineBase):
    __tablename__ = "sync_queue"

    id        = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, nullable=False, index=True)
    event_id  = Column(Integer, nullable=False, index=True)
    method    = Column(String(20), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)   # UTC, when the scan happened locally
    full_name = Column(String(150), nullable=True)

    def to_payload(self) -> dict:
        return {
            "memberId": self.member_id,
            "eventId": self.event_id,
            "method": self.method,
            "timestamp": to_utc(self.timestamp).isoformat(),
        }


def create_store(url: str = DEFAULT_STORE_URL):
    """Create (if needed) the local tables and return a session factory."""
    engine = create_engine(url, connect_args={"check_same_thread": False})
    OfflineBase.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
