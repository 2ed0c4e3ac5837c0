"""
List filtering, sorting and paging.

Pure functions over serialised rows (the dicts produced by to_dict()).
They run on every list request after a full fetch, the same way the
screens derive their visible rows. Python's sort is stable, so ties keep
the order the rows arrived in.
"""
from __future__ import annotations

ALL = "All"

STOCK_LOW = "Low"
STOCK_HEALTHY = "Healthy"
STOCK_FILTERS = {ALL, STOCK_LOW, STOCK_HEALTHY}

PRODUCT_SORT_KEYS = {"name", "category", "price_cents", "purchase_cost_cents", "stock", "min_stock", "created_at"}
CUSTOMER_SORTS = {"name", "recent", "spent"}
SORT_DIRECTIONS = {"asc", "desc"}


def _contains(haystack, needle: str) -> bool:
    return bool(haystack) and needle in str(haystack)


def _icontains(haystack, needle: str) -> bool:
    return bool(haystack) and needle.lower() in str(haystack).lower()


def is_low_stock(row: dict) -> bool:
    return (row.get("stock") or 0) <= (row.get("min_stock") or 0)


def filter_products(
    rows: list[dict],
    *,
    search: str = "",
    category: str = ALL,
    stock_status: str = ALL,
    sort_by: str | None = None,
    sort_dir: str = "asc",
) -> list[dict]:
    """
    Search matches the name case-insensitively or the barcode as a
    substring. Stock status splits on stock <= min_stock.
    """
    search = (search or "").strip()
    category = category or ALL
    stock_status = stock_status or ALL

    def keep(row: dict) -> bool:
        if search and not (_icontains(row.get("name"), search) or _contains(row.get("barcode"), search)):
            return False
        if category != ALL and row.get("category") != category:
            return False
        if stock_status == STOCK_LOW and not is_low_stock(row):
            return False
        if stock_status == STOCK_HEALTHY and is_low_stock(row):
            return False
        return True

    result = [row for row in rows if keep(row)]

    if sort_by:
        if sort_by in ("name", "category"):
            key = lambda row: (row.get(sort_by) or "").lower()
        elif sort_by == "created_at":
            key = lambda row: row.get(sort_by) or ""
        else:
            key = lambda row: row.get(sort_by) or 0
        result.sort(key=key, reverse=(sort_dir == "desc"))

    return result


def filter_customers(rows: list[dict], *, search: str = "", sort_by: str = "recent") -> list[dict]:
    """
    Sorts: name (A-Z), recent (newest first), spent (highest spend first).
    """
    search = (search or "").strip()
    result = [
        row for row in rows
        if not search
        or _icontains(row.get("customer_name"), search)
        or _contains(row.get("phone"), search)
    ]

    if sort_by == "name":
        result.sort(key=lambda row: (row.get("customer_name") or "").lower())
    elif sort_by == "recent":
        result.sort(key=lambda row: row.get("created_at") or "", reverse=True)
    elif sort_by == "spent":
        result.sort(key=lambda row: row.get("total_spend_cents") or 0, reverse=True)

    return result


def filter_orders(rows: list[dict], *, search: str = "", status: str = ALL) -> list[dict]:
    search = (search or "").strip()
    status = status or ALL
    return [
        row for row in rows
        if (
            not search
            or _icontains(row.get("customer_name"), search)
            or _contains(row.get("phone_number"), search)
        )
        and (status == ALL or row.get("status") == status)
    ]


def paginate(rows: list[dict], *, page: int | None, per_page: int) -> dict:
    """Slice rows into a page, same response shape as an unpaged list plus metadata."""
    if page is None:
        return {"items": rows, "count": len(rows)}

    per_page = max(per_page, 1)
    page = max(page, 1)
    total = len(rows)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    items = rows[(page - 1) * per_page: page * per_page]

    return {
        "items": items,
        "count": len(items),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }
