"""
API Router.

Aggregates the endpoint routers mounted under the API prefix.
"""

from fastapi import APIRouter

from modules.backend.api.endpoints import images, notes, rpc, search

router = APIRouter()

router.include_router(notes.router, prefix="/notes", tags=["notes"])
router.include_router(search.router, tags=["notes"])
router.include_router(images.router, prefix="/images", tags=["images"])
router.include_router(rpc.router, tags=["rpc"])
