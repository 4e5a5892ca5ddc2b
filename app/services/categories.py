# File: app/services/categories.py
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ConflictError, InvalidStateError, NotFoundError
from app.db.pagination import paginate
from app.models.agency import Agency
from app.models.category import Category
from app.models.complaint import Complaint


def _name_taken(db: Session, name: str, agency_id: int, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Category.id).filter(
        func.lower(Category.name) == name.lower(),
        Category.agency_id == agency_id,
    )
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    return q.first() is not None


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


def create_category(db: Session, name: str, agency_id: int, description: Optional[str] = None) -> Category:
    name = name.strip()
    if not db.get(Agency, agency_id):
        raise NotFoundError("Agency not found")
    if _name_taken(db, name, agency_id):
        raise ConflictError("Category name already exists for this agency")
    category = Category(name=name, agency_id=agency_id, description=(description or "").strip() or None)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def list_categories(db: Session, page: int, limit: int, search: Optional[str] = None,
                    agency_id: Optional[int] = None) -> dict:
    q = db.query(Category).options(joinedload(Category.agency))
    if search:
        term = f"%{search}%"
        q = q.filter(or_(Category.name.ilike(term), Category.description.ilike(term)))
    if agency_id is not None:
        q = q.filter(Category.agency_id == agency_id)
    return paginate(q.order_by(Category.name.asc(), Category.id.asc()), page, limit)


def public_catalogue(db: Session) -> list[Category]:
    return (
        db.query(Category)
        .options(joinedload(Category.agency))
        .order_by(Category.name.asc(), Category.id.asc())
        .all()
    )


def update_category(db: Session, category_id: int, patch: dict) -> Category:
    category = get_category(db, category_id)
    target_agency = patch.get("agency_id") or category.agency_id

    if target_agency != category.agency_id:
        if not db.get(Agency, target_agency):
            raise NotFoundError("Agency not found")
        in_use = db.query(Complaint).filter(Complaint.category_id == category_id).count()
        if in_use > 0:
            # complaints keep the agency they were filed under
            raise InvalidStateError("Cannot move a category with complaints to another agency")

    name = patch["name"].strip() if patch.get("name") is not None else category.name
    if (name != category.name or target_agency != category.agency_id) and _name_taken(
        db, name, target_agency, exclude_id=category_id
    ):
        raise ConflictError("Category name already exists for this agency")

    category.name = name
    category.agency_id = target_agency
    if "description" in patch:
        category.description = (patch["description"] or "").strip() or None
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int) -> dict:
    category = get_category(db, category_id)
    complaint_count = db.query(Complaint).filter(Complaint.category_id == category_id).count()
    if complaint_count > 0:
        raise InvalidStateError(f"Cannot delete category: {complaint_count} complaint(s) use it")
    db.delete(category)
    db.commit()
    return {"message": "Category deleted successfully"}
