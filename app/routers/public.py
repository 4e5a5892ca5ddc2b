# File: app/routers/public.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.services import categories

router = APIRouter(prefix="/api/public", tags=["public"])

@router.get("/categories")
def list_public_categories(db: Session = Depends(get_db)):
    rows = categories.public_catalogue(db)
    # minimal fields needed to pick a category when filing
    return [
        {"id": r.id, "name": r.name, "agency": {"id": r.agency.id, "name": r.agency.name}}
        for r in rows
    ]
