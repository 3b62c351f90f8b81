"""API routes."""

from fastapi import APIRouter

from parts_inventory.api.routes import ai, inventory, tasks

api_router = APIRouter()

api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory", "stock"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
