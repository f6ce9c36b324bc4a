"""Persistence boundary."""

from atm_system.repositories.account_repository import AccountRepository

__all__ = ["AccountRepository"]
