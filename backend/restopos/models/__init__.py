from .auth import ROLES, User, Permission, RolePermission, SessionToken
from .orders import ORDER_STATUSES, SPLIT_BILL_STATUSES, DiningTable, Order, OrderItem, SplitBill
from .inventory import (
    MOVEMENT_TYPES,
    PURCHASE_ORDER_STATUSES,
    Supplier,
    Product,
    StockMovement,
    PurchaseOrder,
    PurchaseOrderItem,
)
from .activity import ActivityLog

__all__ = [
    'ROLES', 'User', 'Permission', 'RolePermission', 'SessionToken',
    'ORDER_STATUSES', 'SPLIT_BILL_STATUSES', 'DiningTable', 'Order', 'OrderItem', 'SplitBill',
    'MOVEMENT_TYPES', 'PURCHASE_ORDER_STATUSES',
    'Supplier', 'Product', 'StockMovement', 'PurchaseOrder', 'PurchaseOrderItem',
    'ActivityLog',
]
