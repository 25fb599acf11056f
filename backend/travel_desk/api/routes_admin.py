from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from travel_desk.api import get_auth, get_store, require_admin
from travel_desk.models.schemas import (
    AuthStateSchema,
    CustomerSchema,
    CustomerUpdate,
    ImportResponse,
    LoginRequest,
    SiteSettingsSchema,
)
from travel_desk.services.analytics import customer_segment, dashboard_summary
from travel_desk.services.auth import AuthService
from travel_desk.storage.repository import DataStore

router = APIRouter()


@router.post("/login", response_model=AuthStateSchema)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth)) -> AuthStateSchema:
    if not auth.login(payload.username, payload.password):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return AuthStateSchema.from_domain(auth.get_auth_state())


@router.post("/logout", response_model=AuthStateSchema)
def logout(auth: AuthService = Depends(get_auth)) -> AuthStateSchema:
    auth.logout()
    return AuthStateSchema.from_domain(auth.get_auth_state())


@router.get("/session", response_model=AuthStateSchema)
def session(auth: AuthService = Depends(get_auth)) -> AuthStateSchema:
    return AuthStateSchema.from_domain(auth.get_auth_state())


@router.get("/export", dependencies=[Depends(require_admin)])
def export_data(store: DataStore = Depends(get_store)) -> Response:
    return Response(
        content=store.export_data(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="travel-desk-export.json"'},
    )


@router.post("/import", response_model=ImportResponse, dependencies=[Depends(require_admin)])
async def import_data(request: Request, store: DataStore = Depends(get_store)) -> ImportResponse:
    body = (await request.body()).decode("utf-8", errors="replace")
    if not store.import_data(body):
        raise HTTPException(status_code=400, detail="Invalid data structure; nothing was imported")
    return ImportResponse(success=True, backups=store.list_backups())


@router.get("/customers", response_model=List[CustomerSchema], dependencies=[Depends(require_admin)])
def list_customers(store: DataStore = Depends(get_store)) -> List[CustomerSchema]:
    bookings = store.get_bookings()
    customers = []
    for customer in store.get_customers():
        schema = CustomerSchema.from_domain(customer)
        schema.segment = customer_segment(customer, bookings)
        customers.append(schema)
    return customers


@router.put(
    "/customers/{customer_id}", response_model=CustomerSchema, dependencies=[Depends(require_admin)]
)
def update_customer(
    customer_id: str, payload: CustomerUpdate, store: DataStore = Depends(get_store)
) -> CustomerSchema:
    customer = store.update_customer(customer_id, payload.model_dump(exclude_unset=True))
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerSchema.from_domain(customer)


@router.delete("/customers/{customer_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_customer(customer_id: str, store: DataStore = Depends(get_store)) -> None:
    if not store.delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")


@router.get("/dashboard", dependencies=[Depends(require_admin)])
def dashboard(store: DataStore = Depends(get_store)) -> dict:
    return dashboard_summary(store)


@router.get("/settings", response_model=SiteSettingsSchema)
def site_settings(store: DataStore = Depends(get_store)) -> SiteSettingsSchema:
    return SiteSettingsSchema.from_domain(store.get_settings())
