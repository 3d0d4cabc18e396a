from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import engine, Base
from shared.config.settings import BASE_PATH
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.pet_service import models as pet_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401
from services.payment_service import models as payment_models  # noqa: F401

from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router
from services.pet_service.router import router as pet_router
from services.order_service.router import admin_router as order_admin_router
from services.order_service.router import router as order_router
from services.payment_service.router import router as payment_router

app = FastAPI(title="Pet Shop Commerce API", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "petshop_api")

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- ERROR HANDLING ---
register_exception_handlers(app)

for router in (auth_router, product_router, pet_router, order_router, order_admin_router, payment_router):
    app.include_router(router, prefix=BASE_PATH)


@app.get("/health")
async def health_check():
    return {"service": "petshop", "status": "running"}


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
