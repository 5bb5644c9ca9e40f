"""API routes."""

from fastapi import APIRouter

from gedkeeper.api import changes, data_sets, import_routes, jobs, records

api_router = APIRouter()

# Include sub-routers
api_router.include_router(data_sets.router, prefix="/data-sets", tags=["data-sets"])
api_router.include_router(import_routes.router, prefix="/import", tags=["import"])
api_router.include_router(records.router, prefix="/records", tags=["records"])
api_router.include_router(changes.router, prefix="/changes", tags=["changes"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
