"""API v1 router aggregator.

All v1 endpoint routers are included here under the /api/v1 prefix.
"""

from fastapi import APIRouter

from haulmatch.api.v1 import matching

router = APIRouter()

router.include_router(matching.router, prefix="/matching", tags=["matching"])
