# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    ORDERS = "ORDERS"
    BILLS = "BILLS"
    TABLES = "TABLES"
    INVENTORY = "INVENTORY"
    SUPPLIERS = "SUPPLIERS"
    PURCHASING = "PURCHASING"
    USERS = "USERS"
    SYSTEM = "SYSTEM"
