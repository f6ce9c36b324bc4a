"""Business logic services."""

from atm_system.services.account_service import AccountService

__all__ = ["AccountService"]
