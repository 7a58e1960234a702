import logging
from fastapi import FastAPI
from storefront.version import VERSION
from storefront.api import cart, categories, checkout, coupons, orders, payments, products
from storefront.core.errors import register_exception_handlers
from storefront.core.logging import configure_logging
from prometheus_fastapi_instrumentator import Instrumentator

configure_logging()
logger = logging.getLogger(__name__)

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title="Storefront API", version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/metrics",
    should_gzip=True,
)

register_exception_handlers(app)

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/v1/_info")
def info():
    return {"service": "storefront", "version": VERSION}

@app.on_event("startup")
async def startup_event():
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            logger.debug("route %s %s", sorted(route.methods), route.path)
    logger.info("storefront %s started", VERSION)

app.include_router(categories.router, prefix='/api/categories', tags=['categories'])
app.include_router(products.router, prefix='/api/products', tags=['products'])
app.include_router(cart.router, prefix='/api/cart', tags=['cart'])
app.include_router(checkout.router, prefix='/api/checkout', tags=['checkout'])
app.include_router(orders.router, prefix='/api/orders', tags=['orders'])
app.include_router(orders.admin_router, prefix='/api/admin/orders', tags=['admin'])
app.include_router(coupons.router, prefix='/api/coupons', tags=['coupons'])
app.include_router(payments.router, prefix='/api/payment', tags=['payments'])
