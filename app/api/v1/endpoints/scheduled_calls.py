from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from app import crud, schemas
from app.core import deps
from app.db.database import get_db
from app.models.scheduled_call import CallStatus

router = APIRouter()

@router.get("/", response_model=List[schemas.ScheduledCall])
def get_scheduled_calls(
    status_filter: Optional[CallStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Get the current user's calls ordered by scheduled time"""
    return crud.scheduled_call.get_by_user(
        db, user_id=current_user.id, status=status_filter
    )

@router.post("/", response_model=schemas.ScheduledCall, status_code=status.HTTP_201_CREATED)
def schedule_call(
    *,
    db: Session = Depends(get_db),
    call_in: schemas.ScheduledCallCreate,
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Schedule a future check-in call"""
    return crud.scheduled_call.create_pending(
        db, obj_in=call_in, user_id=current_user.id
    )

@router.post("/{call_id}/cancel", response_model=schemas.ScheduledCall)
def cancel_scheduled_call(
    *,
    db: Session = Depends(get_db),
    call_id: int,
    current_user: schemas.AuthUser = Depends(deps.get_current_user)
) -> Any:
    """Cancel a pending call"""
    try:
        call = crud.scheduled_call.cancel(db, call_id=call_id, user_id=current_user.id)
    except crud.CallNotPendingError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    if not call:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Scheduled call not found"
        )
    return call
