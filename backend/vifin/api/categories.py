"""
Category API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from vifin.database import get_db
from vifin.dependencies import get_current_user_id
from vifin.models import Category
from vifin.models.category import CategoryType
from vifin.schemas.category import CategoryResponse, CategoryList

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=CategoryList)
def list_categories(
    type: Optional[CategoryType] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Global defaults plus the caller's own categories."""
    query = db.query(Category).filter(
        or_(Category.user_id == user_id, Category.is_default == True)
    )
    if type:
        query = query.filter(Category.type == type)

    categories = query.order_by(Category.priority.asc(), Category.name.asc()).all()
    return CategoryList(
        items=[CategoryResponse.model_validate(c) for c in categories],
        total=len(categories)
    )
