from typing import List

from fastapi import APIRouter, Depends, HTTPException

from travel_desk.api import get_store, require_admin
from travel_desk.models.schemas import TripCreate, TripSchema, TripUpdate
from travel_desk.storage.repository import DataStore

router = APIRouter()


@router.get("/", response_model=List[TripSchema])
def list_trips(featured: bool = False, store: DataStore = Depends(get_store)) -> List[TripSchema]:
    trips = store.get_trips()
    if featured:
        trips = [t for t in trips if t.featured]
    return [TripSchema.from_domain(t) for t in trips]


@router.get("/{trip_id}", response_model=TripSchema)
def get_trip(trip_id: str, store: DataStore = Depends(get_store)) -> TripSchema:
    trip = store.get_trip_by_id(trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    return TripSchema.from_domain(trip)


@router.post("/", response_model=TripSchema, status_code=201, dependencies=[Depends(require_admin)])
def create_trip(payload: TripCreate, store: DataStore = Depends(get_store)) -> TripSchema:
    return TripSchema.from_domain(store.add_trip(payload.to_payload()))


@router.put("/{trip_id}", response_model=TripSchema, dependencies=[Depends(require_admin)])
def update_trip(
    trip_id: str, payload: TripUpdate, store: DataStore = Depends(get_store)
) -> TripSchema:
    trip = store.update_trip(trip_id, payload.model_dump(exclude_unset=True))
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    return TripSchema.from_domain(trip)


@router.delete("/{trip_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_trip(trip_id: str, store: DataStore = Depends(get_store)) -> None:
    if not store.delete_trip(trip_id):
        raise HTTPException(status_code=404, detail="Trip not found")
