# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)
# Codes are "resource:action" strings checked by require_permission().

from .categories import PermissionCategory


# -- ORDERS --

ORDER_PERMISSIONS = [
    ("orders:read", "View Orders", "View open and historical orders", PermissionCategory.ORDERS),
    ("orders:create", "Create Orders", "Open a new order for a table (cashier access)", PermissionCategory.ORDERS),
    (
        "orders:update",
        "Update Orders",
        "Add, change and remove order items; change order status",
        PermissionCategory.ORDERS,
    ),
]


# -- BILLS --

BILL_PERMISSIONS = [
    ("bills:read", "View Split Bills", "View the split bills of an order", PermissionCategory.BILLS),
    ("bills:split", "Split Bills", "Split an order's bill between guests", PermissionCategory.BILLS),
    ("bills:settle", "Settle Bills", "Mark split bills as paid or pending", PermissionCategory.BILLS),
]


# -- TABLES --

TABLE_PERMISSIONS = [
    ("tables:read", "View Tables", "View the floor tables", PermissionCategory.TABLES),
    ("tables:manage", "Manage Tables", "Create and edit floor tables", PermissionCategory.TABLES),
    ("tables:transfer", "Transfer Tables", "Move orders between tables and split tables", PermissionCategory.TABLES),
]


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    ("inventory:read", "View Inventory", "View products, quantities and stock movements", PermissionCategory.INVENTORY),
    ("inventory:create", "Create Products", "Add products to inventory", PermissionCategory.INVENTORY),
    ("inventory:update", "Edit Products", "Edit product details", PermissionCategory.INVENTORY),
    ("inventory:delete", "Delete Products", "Deactivate products", PermissionCategory.INVENTORY),
    ("inventory:adjust", "Record Stock Movements", "Record inbound, outbound and adjustment movements", PermissionCategory.INVENTORY),
]


# -- SUPPLIERS --

SUPPLIER_PERMISSIONS = [
    ("suppliers:read", "View Suppliers", "View supplier list and metrics", PermissionCategory.SUPPLIERS),
    ("suppliers:create", "Create Suppliers", "Add suppliers", PermissionCategory.SUPPLIERS),
    ("suppliers:update", "Edit Suppliers", "Edit supplier details", PermissionCategory.SUPPLIERS),
    ("suppliers:delete", "Delete Suppliers", "Deactivate suppliers", PermissionCategory.SUPPLIERS),
]


# -- PURCHASING --

PURCHASE_ORDER_PERMISSIONS = [
    ("purchase_orders:read", "View Purchase Orders", "View purchase orders", PermissionCategory.PURCHASING),
    ("purchase_orders:create", "Create Purchase Orders", "Raise purchase orders with suppliers", PermissionCategory.PURCHASING),
    (
        "purchase_orders:update",
        "Update Purchase Orders",
        "Change status, notes and delivery date (receiving books stock)",
        PermissionCategory.PURCHASING,
    ),
    ("purchase_orders:delete", "Delete Purchase Orders", "Delete purchase orders", PermissionCategory.PURCHASING),
]


# -- USERS --

USER_PERMISSIONS = [
    ("user:read", "View Users", "View staff accounts", PermissionCategory.USERS),
    ("user:create", "Create Users", "Create staff accounts", PermissionCategory.USERS),
    ("user:update", "Edit Users", "Edit staff accounts and roles", PermissionCategory.USERS),
    ("user:delete", "Delete Users", "Deactivate staff accounts", PermissionCategory.USERS),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    ("activity:read", "View Activity Log", "View the staff activity log", PermissionCategory.SYSTEM),
]


PERMISSION_DEFINITIONS = (
    ORDER_PERMISSIONS
    + BILL_PERMISSIONS
    + TABLE_PERMISSIONS
    + INVENTORY_PERMISSIONS
    + SUPPLIER_PERMISSIONS
    + PURCHASE_ORDER_PERMISSIONS
    + USER_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
