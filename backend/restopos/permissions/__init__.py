# Overview: Permission system package.
# Re-exports the policy table (definitions + default role grants) and helpers.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    ORDER_PERMISSIONS,
    BILL_PERMISSIONS,
    TABLE_PERMISSIONS,
    INVENTORY_PERMISSIONS,
    SUPPLIER_PERMISSIONS,
    PURCHASE_ORDER_PERMISSIONS,
    USER_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
    split_permission_code,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "ORDER_PERMISSIONS",
    "BILL_PERMISSIONS",
    "TABLE_PERMISSIONS",
    "INVENTORY_PERMISSIONS",
    "SUPPLIER_PERMISSIONS",
    "PURCHASE_ORDER_PERMISSIONS",
    "USER_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
    "split_permission_code",
]
