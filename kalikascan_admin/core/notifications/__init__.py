from .notification_service import NotificationService

__all__ = ["NotificationService"]
