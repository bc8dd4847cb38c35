# Overview: Service-layer operations for inventory products.

"""
Products Service

Products are the stock-keeping items the restaurant buys (ingredients,
drinks, packaging). quantity is the on-hand count; after creation it only
changes through stock_service.record_movement, so it is not writable through
update_product.

Deleting a product is a soft delete (is_active=False): stock movements and
purchase order lines keep pointing at it.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Product, Supplier
from ..validation import ConflictError, ModelValidationPolicy, ValidationError


PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "sku", "name", "description", "category", "quantity",
        "unit_price", "supplier_id", "is_active",
    },
    required_on_create={"sku", "name"},
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={
        "sku", "name", "description", "category",
        "unit_price", "supplier_id", "is_active",
    },
)

PRODUCT_MUTABLE_FIELDS = PRODUCT_CREATE_POLICY.writable_fields


class ProductNotFoundError(Exception):
    """Raised when a product is not found."""
    pass


def apply_product_patch(p: Product, patch: dict, fields=PRODUCT_MUTABLE_FIELDS) -> None:
    for k, v in patch.items():
        if k not in fields:
            continue
        setattr(p, k, v)


def _check_supplier(supplier_id: int | None) -> None:
    if supplier_id is None:
        return
    if not db.session.get(Supplier, supplier_id):
        raise ValidationError(f"Supplier {supplier_id} not found")


def get_product(product_id: int) -> Product:
    p = db.session.get(Product, product_id)
    if not p:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return p


def list_products(
    include_inactive: bool = False,
    category: str | None = None,
    supplier_id: int | None = None,
    search: str | None = None,
) -> list[Product]:
    """Products ordered by name; inactive ones are hidden unless asked for."""
    query = db.session.query(Product)
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    if category:
        query = query.filter(Product.category == category)
    if supplier_id is not None:
        query = query.filter(Product.supplier_id == supplier_id)
    if search:
        like = f"%{search.strip()}%"
        query = query.filter(db.or_(Product.name.ilike(like), Product.sku.ilike(like)))

    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def create_product(*, patch: dict) -> Product:
    """
    Create a product from a validated patch dict.

    Raises:
        ConflictError: If the SKU is already taken
        ValidationError: If supplier_id does not exist
    """
    sku = patch.get("sku")
    if not sku:
        raise ValidationError("sku is required")

    existing = db.session.query(Product).filter(Product.sku == sku).first()
    if existing:
        raise ConflictError("SKU already exists.")
    _check_supplier(patch.get("supplier_id"))

    p = Product(quantity=0, unit_price=0.0, is_active=True)
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    p = get_product(product_id)

    # SKU uniqueness enforcement if changing SKU
    if "sku" in patch and patch["sku"] != p.sku:
        existing = (
            db.session.query(Product)
            .filter(Product.sku == patch["sku"], Product.id != p.id)
            .first()
        )
        if existing:
            raise ConflictError("SKU already exists.")
    if "supplier_id" in patch:
        _check_supplier(patch["supplier_id"])

    apply_product_patch(p, patch, PRODUCT_UPDATE_POLICY.writable_fields)
    db.session.commit()
    return p


def delete_product(*, product_id: int) -> Product:
    """Soft-delete a product. Deleting an inactive product is a no-op."""
    p = get_product(product_id)
    if p.is_active:
        p.is_active = False
        db.session.commit()
    return p
