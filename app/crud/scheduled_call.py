from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.scheduled_call import ScheduledCall, CallStatus
from app.schemas.scheduled_call import ScheduledCallCreate

class CallNotPendingError(ValueError):
    """Raised when cancelling a call that already completed or was cancelled"""

class CRUDScheduledCall(CRUDBase[ScheduledCall, ScheduledCallCreate, ScheduledCallCreate]):
    def get_by_user(
        self, db: Session, *, user_id: str, status: Optional[CallStatus] = None
    ) -> List[ScheduledCall]:
        query = db.query(ScheduledCall).filter(ScheduledCall.user_id == user_id)
        if status is not None:
            query = query.filter(ScheduledCall.status == status)
        return query.order_by(ScheduledCall.scheduled_time.asc()).all()

    def get_pending(self, db: Session, *, user_id: str) -> List[ScheduledCall]:
        return self.get_by_user(db, user_id=user_id, status=CallStatus.PENDING)

    def get_for_user(self, db: Session, *, call_id: int, user_id: str) -> Optional[ScheduledCall]:
        return db.query(ScheduledCall).filter(
            ScheduledCall.id == call_id,
            ScheduledCall.user_id == user_id
        ).first()

    def create_pending(self, db: Session, *, obj_in: ScheduledCallCreate, user_id: str) -> ScheduledCall:
        db_obj = ScheduledCall(
            user_id=user_id,
            scheduled_time=obj_in.scheduled_time,
            status=CallStatus.PENDING
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def log_completed(self, db: Session, *, user_id: str, called_at: Optional[datetime] = None) -> ScheduledCall:
        """Record a call that was placed immediately through the relay"""
        db_obj = ScheduledCall(
            user_id=user_id,
            scheduled_time=called_at or datetime.now(timezone.utc),
            status=CallStatus.COMPLETED
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def cancel(self, db: Session, *, call_id: int, user_id: str) -> Optional[ScheduledCall]:
        """
        Move one pending call to cancelled.

        The status check is part of the UPDATE's WHERE clause, so a call that
        completes concurrently is never flipped back. Returns None if the call
        does not exist for this user; raises CallNotPendingError otherwise.
        """
        updated = db.query(ScheduledCall).filter(
            ScheduledCall.id == call_id,
            ScheduledCall.user_id == user_id,
            ScheduledCall.status == CallStatus.PENDING
        ).update({ScheduledCall.status: CallStatus.CANCELLED}, synchronize_session=False)
        db.commit()

        call = self.get_for_user(db, call_id=call_id, user_id=user_id)
        if call is None:
            return None
        if not updated:
            raise CallNotPendingError(f"Call is already {call.status.value}")
        db.refresh(call)
        return call

scheduled_call = CRUDScheduledCall(ScheduledCall)
