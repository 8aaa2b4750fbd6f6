"""DB API routes."""

from fastapi import APIRouter

from db import clear_db

from ..loader import forget_project

router = APIRouter()


@router.post("/clear")
async def clear():
    """Clear DB: remove all project folders and drop every cached graph."""
    result = await clear_db()
    forget_project()
    return result
