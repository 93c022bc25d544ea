from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.database import get_db
from finboard.core.deps import get_current_user
from finboard.models.category import Category
from finboard.models.user import User
from finboard.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeResponse,
    CategoryUpdate,
)
from finboard.services.budget_store import visible_categories_stmt
from finboard.services.category_scope import CategoryTree

router = APIRouter(prefix="/categories", tags=["categories"])


_DEFAULT_CATEGORIES: list[dict[str, Any]] = [
    {"name": "Vehicle", "icon": "car", "color": "#3b82f6", "children": [
        ("Leasing", "file-signature"), ("Vehicle insurance", "shield-check"),
        ("Rentals", "key"), ("Vehicle maintenance", "wrench"),
        ("Parking", "parking-circle"), ("Fuel", "fuel"),
    ]},
    {"name": "Housing", "icon": "home", "color": "#ef4444", "children": [
        ("Rent", "home"), ("Mortgage", "landmark"),
        ("Utilities", "plug"), ("Maintenance", "hammer"),
    ]},
    {"name": "Food", "icon": "utensils", "color": "#22c55e", "children": [
        ("Groceries", "shopping-cart"), ("Dining Out", "coffee"),
    ]},
    {"name": "Transport", "icon": "bus", "color": "#eab308", "children": [
        ("Public Transit", "bus-front"), ("Taxi/Ride Share", "car-taxi-front"),
    ]},
    {"name": "Entertainment", "icon": "film", "color": "#a855f7", "children": [
        ("Movies", "film"), ("Games", "gamepad-2"), ("Subscriptions", "credit-card"),
    ]},
    {"name": "Health", "icon": "heart-pulse", "color": "#ec4899", "children": [
        ("Medical", "stethoscope"), ("Dental", "smile"), ("Pharmacy", "pill"),
    ]},
    {"name": "Income", "icon": "wallet", "color": "#10b981", "type": "income", "children": [
        ("Salary", "banknote"), ("Bonus", "gift"), ("Interest", "percent"), ("Other", "plus"),
    ]},
]


async def _visible(db: AsyncSession, user: User) -> list[Category]:
    result = await db.execute(
        visible_categories_stmt(user.id).order_by(Category.sort_order, Category.name)
    )
    return list(result.scalars().all())


async def _owned_category(db: AsyncSession, user: User, category_id: int) -> Category:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.user_id == user.id)
    )
    category = result.scalar_one_or_none()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _check_parent(tree: CategoryTree, parent_id: int | None, child_id: int | None = None) -> None:
    """Keep the tree two levels deep: parents must be top-level, and a parent cannot be re-nested."""
    if parent_id is None:
        return
    if parent_id not in tree:
        raise HTTPException(status_code=404, detail="Parent category not found")
    if parent_id == child_id:
        raise HTTPException(status_code=422, detail="A category cannot be its own parent")
    if tree.depth_of(parent_id) != 1:
        raise HTTPException(status_code=422, detail="Sub-categories cannot have children")
    if child_id is not None and tree.children_of(child_id):
        raise HTTPException(
            status_code=422, detail="A category with sub-categories cannot become a sub-category"
        )


@router.get("/", response_model=list[CategoryTreeResponse])
async def list_categories(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Top-level categories, each with its direct sub-categories."""
    categories = await _visible(db, user)
    tree = CategoryTree.from_categories(categories)
    by_id = {c.id: c for c in categories}

    roots = []
    for c in categories:
        if c.parent_id is not None:
            continue
        node = CategoryTreeResponse.model_validate(c)
        node.subcategories = [
            CategoryResponse.model_validate(by_id[child]) for child in tree.children_of(c.id)
        ]
        roots.append(node)
    return roots


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    payload: CategoryCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tree = CategoryTree.from_categories(await _visible(db, user))
    _check_parent(tree, payload.parent_id)

    category = Category(
        user_id=user.id,
        parent_id=payload.parent_id,
        name=payload.name,
        type=payload.type.value,
        icon=payload.icon,
        color=payload.color,
    )
    db.add(category)
    await db.flush()
    await db.refresh(category)
    return category


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    category = await _owned_category(db, user, category_id)
    data = payload.model_dump(exclude_unset=True)

    if "parent_id" in data:
        tree = CategoryTree.from_categories(await _visible(db, user))
        _check_parent(tree, data["parent_id"], category.id)

    for field, value in data.items():
        if value is None and field != "parent_id":
            continue
        setattr(category, field, value)

    await db.flush()
    await db.refresh(category)
    return category


@router.post("/seed-defaults", response_model=list[CategoryResponse], status_code=201)
async def seed_default_categories(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create the default parent/child categories. Skips any that already exist by name."""
    existing_names = {c.name.lower() for c in await _visible(db, user)}

    created = []
    for order, defaults in enumerate(_DEFAULT_CATEGORIES):
        cat_type = defaults.get("type", "expense")
        if defaults["name"].lower() in existing_names:
            continue
        parent = Category(
            user_id=user.id,
            name=defaults["name"],
            type=cat_type,
            icon=defaults["icon"],
            color=defaults["color"],
            sort_order=order,
        )
        db.add(parent)
        await db.flush()
        created.append(parent)

        for child_order, (name, icon) in enumerate(defaults["children"]):
            if name.lower() in existing_names:
                continue
            child = Category(
                user_id=user.id,
                parent_id=parent.id,
                name=name,
                type=cat_type,
                icon=icon,
                color=defaults["color"],
                sort_order=child_order,
            )
            db.add(child)
            created.append(child)

    await db.flush()
    for cat in created:
        await db.refresh(cat)
    return created


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    category = await _owned_category(db, user, category_id)
    await db.delete(category)
