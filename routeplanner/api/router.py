from fastapi import APIRouter

from routeplanner.api.endpoints import maps, route

api_router = APIRouter()

api_router.include_router(maps.router, tags=["maps"])
api_router.include_router(route.router, tags=["route"])
