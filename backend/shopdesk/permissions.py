"""
Permission Constants and Role Mappings

WHY: Centralized permission definitions ensure consistency across the application.
Roles are fixed (admin, staff); each maps to a static permission set.

DESIGN PRINCIPLES:
- Permissions are granular (one action per permission)
- Admin has all permissions
- Staff run the order desk: view catalogue, take and track orders,
  record stock movements. Costs and financial totals stay hidden.
"""

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
VALID_ROLES = {ROLE_ADMIN, ROLE_STAFF}


class PermissionCategory:
    """Permission categories for organization."""
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    ORDERS = "ORDERS"
    CUSTOMERS = "CUSTOMERS"
    REPORTING = "REPORTING"


# Each permission is defined as: (code, name, description, category)
PERMISSION_DEFINITIONS = [
    ("VIEW_PRODUCTS", "View Products", "View the product catalogue", PermissionCategory.CATALOG),
    ("MANAGE_PRODUCTS", "Manage Products", "Create, edit, clone and delete products", PermissionCategory.CATALOG),
    ("VIEW_COSTS", "View Costs", "See purchase costs on products", PermissionCategory.CATALOG),
    ("ADJUST_STOCK", "Adjust Stock", "Record IN/OUT stock movements", PermissionCategory.INVENTORY),
    ("VIEW_ORDERS", "View Orders", "View orders and invoices", PermissionCategory.ORDERS),
    ("MANAGE_ORDERS", "Manage Orders", "Create and edit orders", PermissionCategory.ORDERS),
    ("APPROVE_ORDERS", "Approve Orders", "Approve, cancel and track order status", PermissionCategory.ORDERS),
    ("DELETE_ORDERS", "Delete Orders", "Permanently delete orders", PermissionCategory.ORDERS),
    ("VIEW_CUSTOMERS", "View Customers", "View customers and their history", PermissionCategory.CUSTOMERS),
    ("MANAGE_CUSTOMERS", "Manage Customers", "Create and edit customers", PermissionCategory.CUSTOMERS),
    ("DELETE_CUSTOMERS", "Delete Customers", "Permanently delete customers", PermissionCategory.CUSTOMERS),
    ("VIEW_FINANCIALS", "View Financials", "See stock valuation and revenue", PermissionCategory.REPORTING),
]

ALL_PERMISSION_CODES = frozenset(perm[0] for perm in PERMISSION_DEFINITIONS)

DEFAULT_ROLE_PERMISSIONS = {
    ROLE_ADMIN: ALL_PERMISSION_CODES,
    ROLE_STAFF: frozenset({
        "VIEW_PRODUCTS",
        "ADJUST_STOCK",
        "VIEW_ORDERS",
        "MANAGE_ORDERS",
        "APPROVE_ORDERS",
        "VIEW_CUSTOMERS",
        "MANAGE_CUSTOMERS",
    }),
}


def permissions_for_role(role: str | None) -> frozenset:
    """Unknown roles get nothing."""
    return DEFAULT_ROLE_PERMISSIONS.get((role or "").lower(), frozenset())


def validate_permission_code(code: str) -> bool:
    return code in ALL_PERMISSION_CODES
