from .auth_client import FirebaseAuthClient

__all__ = ["FirebaseAuthClient"]
