from typing import Any, Dict, List, Optional
from sqlalchemy import delete, select
from storefront.common.custom_exceptions import ProductNotFound
from storefront.common.utils import isoformat_or_none, now
from storefront.products.constants import logger
from storefront.products.models import FIELD_MAP
from storefront.schema.full_schema import Product


def product_out(p: Product, admin: bool = False) -> Dict[str, Any]:
    out = {"id": p.id, "name": p.name, "salePrice": p.sale_price, "photos": list(p.photos or [])}
    if admin:
        out.update({"unitCost": p.unit_cost, "margin": p.sale_price - p.unit_cost, "active": p.active,
                    "createdAt": isoformat_or_none(p.created_at), "updatedAt": isoformat_or_none(p.updated_at)})
    return out


async def fetch_products(session, active_only: bool) -> List[Product]:
    stmt = select(Product)
    if active_only:
        stmt = stmt.where(Product.active.is_(True))
    stmt = stmt.order_by(Product.name.asc(), Product.id.asc())
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def find_product(session, product_id: str) -> Product:
    product = await session.get(Product, product_id)
    if product is None:
        raise ProductNotFound()
    return product


async def create_product(session, values: Dict[str, Any]) -> Product:
    ts = now()
    product = Product(**{FIELD_MAP[k]: v for k, v in values.items()}, created_at=ts, updated_at=ts)
    product.name = product.name.strip()
    session.add(product)
    await session.flush()
    logger.info("product.created", extra={"product_id": product.id})
    return product


async def patch_product(session, product_id: str, updates: Dict[str, Any]) -> Product:
    product = await find_product(session, product_id)
    for key, value in updates.items():
        if value is None:
            continue
        setattr(product, FIELD_MAP[key], value.strip() if key == "name" else value)
    product.updated_at = now()
    await session.flush()
    return product


async def delete_product(session, product_id: str) -> Optional[str]:
    # order items keep their snapshots, so the catalog row can go
    res = await session.execute(delete(Product).where(Product.id == product_id))
    if res.rowcount == 0:
        raise ProductNotFound()
    return product_id
