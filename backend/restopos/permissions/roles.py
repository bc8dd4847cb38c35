# Overview: Default permission sets per role, seeded by `flask system init`.

from .definitions import PERMISSION_DEFINITIONS


DEFAULT_ROLE_PERMISSIONS = {
    # Admin gets every permission
    "admin": [perm[0] for perm in PERMISSION_DEFINITIONS],

    "manager": [
        "orders:read",
        "orders:create",
        "orders:update",
        "bills:read",
        "bills:split",
        "bills:settle",
        "tables:read",
        "tables:manage",
        "tables:transfer",
        "inventory:read",
        "inventory:create",
        "inventory:update",
        "inventory:delete",
        "inventory:adjust",
        "suppliers:read",
        "suppliers:create",
        "suppliers:update",
        "suppliers:delete",
        "purchase_orders:read",
        "purchase_orders:create",
        "purchase_orders:update",
        "purchase_orders:delete",
        "user:read",
    ],

    "cashier": [
        "orders:read",
        "orders:create",
        "orders:update",
        "bills:read",
        "bills:split",
        "bills:settle",
        "tables:read",
        "tables:transfer",
    ],

    "kitchen": [
        "orders:read",
        "inventory:read",
    ],
}
