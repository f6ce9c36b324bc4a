"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends

from atm_system.api.dependencies import get_service
from atm_system.exceptions import StorageFault
from atm_system.services.account_service import AccountService

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(service: AccountService = Depends(get_service)):
    """
    Return application health status including database connectivity.

    If the database does not answer, the service reports itself
    as degraded rather than failing the request.
    """
    try:
        service.repository.ping()
        db_status = "healthy"
    except StorageFault:
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "atm-system",
        "database": db_status,
    }
