"""
REST API Router.

Aggregates the notepad endpoint routers mounted under /api.
"""

from fastapi import APIRouter

from modules.backend.api.rest.endpoints import auth, files, notes

router = APIRouter()

# Note lifecycle: /save, /load, /delete, /change-url, /stats
router.include_router(notes.router, tags=["notes"])

# Attachments: /upload, /files, /file, /link-files
router.include_router(files.router, tags=["files"])

# Account overlay
router.include_router(auth.router, prefix="/auth", tags=["auth"])
