from fastapi import APIRouter, Depends, status
from typing import List
from stockpanel.db import get_db
from stockpanel.core.security import get_session
from stockpanel.models.sales import (
    ReservationDB,
    ReservationReceipt,
    ReservationUpdate,
    SaleCreate,
    SaleReceipt,
)
from stockpanel.models.user import Session
from stockpanel.services import reservations

router = APIRouter(prefix="/api/reservations", tags=["reservations"])

@router.get("/", response_model=List[ReservationDB])
async def list_reservations(session: Session = Depends(get_session), db=Depends(get_db)):
    return await reservations.list_reservations(db, session)

@router.post("/", response_model=ReservationReceipt, status_code=status.HTTP_201_CREATED)
async def save_reservation(body: SaleCreate, session: Session = Depends(get_session), db=Depends(get_db)):
    return await reservations.create_reservation(db, session, body.items)

@router.put("/{reservation_id}", response_model=ReservationDB)
async def update_reservation(
    reservation_id: str,
    body: ReservationUpdate,
    session: Session = Depends(get_session),
    db=Depends(get_db),
):
    return await reservations.update_reservation_items(db, session, reservation_id, body.items)

@router.post("/{reservation_id}/cancel", response_model=ReservationReceipt)
async def cancel_reservation(reservation_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    return await reservations.cancel_reservation(db, session, reservation_id)

@router.post("/{reservation_id}/confirm", response_model=SaleReceipt)
async def confirm_reservation(reservation_id: str, session: Session = Depends(get_session), db=Depends(get_db)):
    return await reservations.confirm_reservation(db, session, reservation_id)
