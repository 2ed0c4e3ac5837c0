# backend/shopdesk/services/products_service.py
"""
Products Service

Every read takes the caller's SessionContext so purchase costs can be
masked for roles without VIEW_COSTS. Every write commits and then drops
the dashboard snapshot.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product
from ..validation import NotFoundError, ValidationError
from .dashboard_service import invalidate_dashboard_cache
from .filters import (
    filter_products,
    paginate,
    ALL,
    PRODUCT_SORT_KEYS,
    SORT_DIRECTIONS,
    STOCK_FILTERS,
)

PRODUCT_MUTABLE_FIELDS = {
    "name", "category", "description", "price_cents", "purchase_cost_cents",
    "stock", "min_stock", "barcode", "images",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def serialize_product(p: Product, context) -> dict:
    return p.to_dict(include_costs=context.can("VIEW_COSTS"))


def get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if p is None:
        raise NotFoundError("Product not found")
    return p


def list_products(
    context,
    *,
    search: str = "",
    category: str = ALL,
    stock_status: str = ALL,
    sort_by: str | None = None,
    sort_dir: str = "asc",
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Full fetch (newest first), then filter/sort/page in memory.

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    if stock_status not in STOCK_FILTERS:
        raise ValidationError(f"stock_status must be one of: {', '.join(sorted(STOCK_FILTERS))}")
    if sort_by and sort_by not in PRODUCT_SORT_KEYS:
        raise ValidationError(f"sort_by must be one of: {', '.join(sorted(PRODUCT_SORT_KEYS))}")
    if sort_dir not in SORT_DIRECTIONS:
        raise ValidationError("sort_dir must be asc or desc")

    products = (
        db.session.query(Product)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )
    rows = [serialize_product(p, context) for p in products]

    # Sorting on a masked column would leak its ordering
    if sort_by == "purchase_cost_cents" and not context.can("VIEW_COSTS"):
        sort_by = None

    rows = filter_products(
        rows,
        search=search,
        category=category,
        stock_status=stock_status,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )
    return paginate(
        rows,
        page=page,
        per_page=per_page or current_app.config.get("PRODUCTS_PER_PAGE", 8),
    )


def list_categories() -> list[str]:
    """Configured default categories first, then any others in use."""
    categories = list(current_app.config.get("DEFAULT_CATEGORIES", []))
    used = (
        db.session.query(Product.category)
        .filter(Product.category.isnot(None), Product.category != "")
        .distinct()
        .order_by(Product.category.asc())
        .all()
    )
    for (name,) in used:
        if name not in categories:
            categories.append(name)
    return categories


def create_product(*, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    min_stock falls back to DEFAULT_MIN_STOCK when omitted.
    """
    p = Product(
        min_stock=current_app.config.get("DEFAULT_MIN_STOCK", 5),
        images=[],
    )
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    invalidate_dashboard_cache()
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    p = get_product(product_id)
    apply_product_patch(p, patch)
    db.session.commit()
    invalidate_dashboard_cache()
    return p


def clone_product(*, product_id: int) -> Product:
    """
    Copy a product as "<name> (Copy)".

    The clone keeps prices, stock, barcode, images and description.
    min_stock starts from the configured default, as for a new product.
    """
    source = get_product(product_id)
    clone = Product(
        name=f"{source.name} (Copy)",
        category=source.category,
        description=source.description,
        price_cents=source.price_cents,
        purchase_cost_cents=source.purchase_cost_cents,
        stock=source.stock,
        min_stock=current_app.config.get("DEFAULT_MIN_STOCK", 5),
        barcode=source.barcode,
        images=list(source.images or []),
    )
    db.session.add(clone)
    db.session.commit()
    invalidate_dashboard_cache()
    return clone


def delete_product(*, product_id: int) -> None:
    """Hard delete; the product's inventory log goes with it."""
    p = get_product(product_id)
    db.session.delete(p)
    db.session.commit()
    invalidate_dashboard_cache()
