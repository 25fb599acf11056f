from typing import List

from fastapi import APIRouter, Depends, HTTPException

from travel_desk.api import get_booking_service, get_store, require_admin
from travel_desk.models.schemas import BookingSchema, BookingStatusUpdate, CheckoutRequest, CheckoutResponse
from travel_desk.services.booking_service import BookingService
from travel_desk.storage.repository import DataStore

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    service: BookingService = Depends(get_booking_service),
) -> CheckoutResponse:
    result = await service.checkout(
        request.booking.model_dump(exclude_none=True),
        gateway_name=request.gateway,
        payment_method=request.payment_method,
    )
    return CheckoutResponse.from_domain(result)


@router.get("/", response_model=List[BookingSchema], dependencies=[Depends(require_admin)])
def list_bookings(q: str = "", store: DataStore = Depends(get_store)) -> List[BookingSchema]:
    term = q.lower()
    bookings = [
        b
        for b in store.get_bookings()
        if term in b.customer_name.lower() or term in b.customer_email.lower() or term in b.id.lower()
    ]
    return [BookingSchema.from_domain(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(booking_id: str, store: DataStore = Depends(get_store)) -> BookingSchema:
    booking = store.get_booking_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return BookingSchema.from_domain(booking)


@router.patch("/{booking_id}/status", response_model=BookingSchema, dependencies=[Depends(require_admin)])
def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
) -> BookingSchema:
    return BookingSchema.from_domain(service.update_status(booking_id, payload.status))


@router.delete("/{booking_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_booking(booking_id: str, store: DataStore = Depends(get_store)) -> None:
    if not store.delete_booking(booking_id):
        raise HTTPException(status_code=404, detail="Booking not found")
