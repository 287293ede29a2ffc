# client/sync_client.py

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from client.offline_store import (
    ATTENDANCE_METHODS,
    DEFAULT_STORE_URL,
    RosterMember,
    SyncQueueRecord,
    create_store,
    to_utc,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds


class OfflineSyncClient:
    """
    Captures check-ins locally while the device is offline and replays them
    to POST /api/attendance/sync-batch once it is back online.

    Sent records are only removed after the server answers the batch; any
    transport or server error leaves the queue untouched for the next flush.
    The server reports bad records individually and skips records it already
    has, so replaying a batch twice is safe.
    """

    def __init__(self, base_url: str, token: Optional[str] = None,
                 store_url: str = DEFAULT_STORE_URL, session=None, session_factory=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http = session or requests.Session()
        self.Session = session_factory or create_store(store_url)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api{path}"

    # -- roster -------------------------------------------------------------

    def cache_roster(self, event_id: int) -> int:
        """Download the roster for an event; returns the number of members cached (0 when offline)."""
        try:
            response = self.http.get(
                self._url(f"/attendance/{event_id}/offline-roster"),
                headers=self._headers(),
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            entries = response.json()
        except requests.RequestException as e:
            logger.warning(f"Roster download for event {event_id} failed: {e}")
            return 0

        db = self.Session()
        try:
            for entry in entries:
                db.merge(RosterMember(
                    id=entry["id"],
                    event_id=event_id,
                    full_name=entry["fullName"],
                    fellowship_number=entry["fellowshipNumber"],
                    phone_number=entry.get("phoneNumber"),
                    qr_code=entry["qrCode"],
                    region_name=entry.get("regionName"),
                ))
            db.commit()
        finally:
            db.close()
        logger.info(f"Cached {len(entries)} roster member(s) for event {event_id}")
        return len(entries)

    def lookup(self, qr_code: Optional[str] = None, fellowship_number: Optional[str] = None) -> Optional[RosterMember]:
        db = self.Session()
        try:
            query = db.query(RosterMember)
            if qr_code:
                return query.filter(RosterMember.qr_code == qr_code.strip()).first()
            if fellowship_number:
                return query.filter(RosterMember.fellowship_number == fellowship_number.strip().upper()).first()
            return None
        finally:
            db.close()

    # -- queue --------------------------------------------------------------

    def enqueue(self, member_id: int, event_id: int, method: str = "QR",
                observed_at: Optional[datetime] = None, full_name: Optional[str] = None) -> int:
        """
        Queue a check-in. Admission rules are left to the server on replay;
        only a malformed method is refused here, since the server could never
        accept it.
        """
        method = (method or "").strip().upper()
        if method not in ATTENDANCE_METHODS:
            raise ValueError(f"Unknown check-in method {method!r}; expected one of {', '.join(ATTENDANCE_METHODS)}")

        db = self.Session()
        try:
            record = SyncQueueRecord(
                member_id=member_id,
                event_id=event_id,
                method=method,
                timestamp=to_utc(observed_at or datetime.now(timezone.utc)),
                full_name=full_name,
            )
            db.add(record)
            db.commit()
            return record.id
        finally:
            db.close()

    def pending(self):
        db = self.Session()
        try:
            return db.query(SyncQueueRecord).order_by(SyncQueueRecord.id.asc()).all()
        finally:
            db.close()

    def flush(self) -> Optional[dict]:
        """
        Send the whole queue as one batch. Returns the server's summary, or
        None when nothing was sent or the request failed.
        """
        db = self.Session()
        try:
            records = db.query(SyncQueueRecord).order_by(SyncQueueRecord.id.asc()).all()
            if not records:
                return None
            sent_ids = [r.id for r in records]
            payload = [r.to_payload() for r in records]

            try:
                response = self.http.post(
                    self._url("/attendance/sync-batch"),
                    json=payload,
                    headers=self._headers(),
                    timeout=REQUEST_TIMEOUT,
                )
                response.raise_for_status()
                result = response.json()
            except requests.RequestException as e:
                logger.warning(f"Offline sync of {len(payload)} record(s) failed, queue kept: {e}")
                return None

            # records queued during the request stay for the next flush
            db.query(SyncQueueRecord).filter(SyncQueueRecord.id.in_(sent_ids)).delete(synchronize_session=False)
            db.commit()
            logger.info(
                f"Offline sync: {result.get('syncedCount')}/{result.get('totalReceived')} synced, "
                f"{len(result.get('errors', []))} error(s)"
            )
            return result
        finally:
            db.close()

    def on_online(self) -> Optional[dict]:
        """Hook for the connectivity monitor: flush as soon as the network returns."""
        return self.flush()
