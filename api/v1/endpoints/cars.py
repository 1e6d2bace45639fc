# api/v1/endpoints/cars.py
from fastapi import APIRouter, Depends, Request

from services.store.car_store import CarStore

router = APIRouter()


def get_car_store(request: Request) -> CarStore:
    return request.app.state.car_store


@router.get("")
async def list_cars(store: CarStore = Depends(get_car_store)):
    """Active cars of the curated list (sold ones are hidden)."""
    return store.list_active()
