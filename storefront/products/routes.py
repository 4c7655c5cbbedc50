from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.dependencies import require_admin
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.products.constants import logger
from storefront.products.models import ProductCreateIn, ProductUpdateIn
from storefront.products.repository import (create_product, delete_product, fetch_products, find_product,
                                            patch_product, product_out)

prods_public_router = APIRouter()
prods_admin_router = APIRouter(dependencies=[Depends(require_admin)])


@prods_public_router.get("/")
async def list_active_products(session: AsyncSession = Depends(get_session)):
    products = await fetch_products(session, active_only=True)
    return success_response({"products": [product_out(p) for p in products]})


@prods_admin_router.get("/")
async def admin_list_products(session: AsyncSession = Depends(get_session)):
    products = await fetch_products(session, active_only=False)
    return success_response({"products": [product_out(p, admin=True) for p in products]})


@prods_admin_router.post("/", status_code=status.HTTP_201_CREATED)
async def admin_create_product(payload: ProductCreateIn, session: AsyncSession = Depends(get_session)):
    product = await create_product(session, payload.model_dump())
    await session.commit()
    return success_response({"product": product_out(product, admin=True)}, status_code=status.HTTP_201_CREATED)


@prods_admin_router.get("/{product_id}")
async def admin_get_product(product_id: str, session: AsyncSession = Depends(get_session)):
    product = await find_product(session, product_id)
    return success_response({"product": product_out(product, admin=True)})


@prods_admin_router.patch("/{product_id}")
async def admin_update_product(product_id: str, payload: ProductUpdateIn,
                               session: AsyncSession = Depends(get_session)):
    product = await patch_product(session, product_id, payload.model_dump(exclude_unset=True))
    await session.commit()
    logger.info("product.updated", extra={"product_id": product_id})
    return success_response({"product": product_out(product, admin=True)})


@prods_admin_router.delete("/{product_id}")
async def admin_delete_product(product_id: str, session: AsyncSession = Depends(get_session)):
    await delete_product(session, product_id)
    await session.commit()
    logger.info("product.deleted", extra={"product_id": product_id})
    return success_response({"productId": product_id})
