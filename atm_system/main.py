"""
ATM System FastAPI application.

HTTP front end over the same AccountService the console
terminal uses. All routers are registered here.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from atm_system.config import get_settings
from atm_system.api.admin import router as admin_router
from atm_system.api.auth import router as auth_router
from atm_system.api.customer import router as customer_router
from atm_system.api.errors import error_detail
from atm_system.api.health import router as health_router
from atm_system.exceptions import StorageFault

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Banking terminal: customer cash operations and account administration",
)


@app.exception_handler(StorageFault)
def storage_fault_handler(request: Request, exc: StorageFault):
    logger.error("Storage fault while serving %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": error_detail(exc)})


# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(customer_router)
app.include_router(admin_router)
