import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import access, dashboard, orders, products
from storefront.core.config import settings
from storefront.core.errors import AppError, error_payload
from storefront.rbac import build_access_control

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Storefront and point-of-sale backend with role-based access control",
    version="0.1.0",
)

# Built once; the maps are validated here and never change afterwards
app.state.access = build_access_control(
    login_path=settings.LOGIN_PATH,
    cashier_home=settings.CASHIER_HOME_PATH,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.code, exc.message, exc.details),
        headers=headers,
    )


# Routers
app.include_router(products.router)
app.include_router(orders.router)
app.include_router(dashboard.router)
app.include_router(access.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "0.1.0"}
