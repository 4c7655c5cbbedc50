from fastapi import APIRouter
from storefront.api.__init__ import version_prefix
from storefront.auth.routes import auth_router
from storefront.chat.routes import chat_router
from storefront.cashflow.routes import cashflow_router
from storefront.orders.routes import orders_admin_router, orders_public_router
from storefront.products.routes import prods_admin_router, prods_public_router
from storefront.common.routes import home_router


public_routers = APIRouter(prefix=version_prefix)

public_routers.include_router(auth_router, prefix="/customer", tags=["customer-auth"])
public_routers.include_router(chat_router, prefix="/customer", tags=["chat"])
public_routers.include_router(orders_public_router, prefix="/orders", tags=["orders"])
public_routers.include_router(prods_public_router, prefix="/products", tags=["products-public"])
public_routers.include_router(home_router, tags=["home"])

#--------------------------------------------------------------------------------------------------------

admin_routers = APIRouter(prefix=f"{version_prefix}/admin")

admin_routers.include_router(orders_admin_router, prefix="/orders", tags=["orders-admin"])
admin_routers.include_router(prods_admin_router, prefix="/products", tags=["products-admin"])
admin_routers.include_router(cashflow_router, prefix="/cash-movements", tags=["cashflow-admin"])
