import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from moturn.auth.dependencies import get_current_user
from moturn.models.category import CategoryCreate, CategoryRead
from moturn.storage import storage
from moturn.validation import parse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryRead])
def list_categories():
    try:
        return storage.get_categories()
    except SQLAlchemyError:
        logger.exception("Error fetching categories")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.post("", response_model=CategoryRead)
def create_category(payload: dict = Body(...), user=Depends(get_current_user)):
    data = parse(CategoryCreate, payload, "Invalid category data")
    if storage.get_category_by_slug(data.slug):
        raise HTTPException(status_code=400, detail="Category slug already exists")
    try:
        category = storage.create_category(data)
    except SQLAlchemyError:
        logger.exception("Error creating category")
        raise HTTPException(status_code=500, detail="Failed to create category")
    logger.info(f"Category {category.slug} created by {user}")
    return category
