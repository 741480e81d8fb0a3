from .admin_account_service import AdminAccountService

__all__ = ["AdminAccountService"]
