import logging
from typing import Any, Dict, Iterator, Optional

from firebase_admin import auth

logger = logging.getLogger(__name__)


class FirebaseAuthClient:
    """
    Firebase Authentication operations bound to one Firebase app.
    """

    def __init__(self, app=None, page_size: int = 1000):
        self.app = app
        self.page_size = page_size

    def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """
        Verify an ID token.

        Returns:
            The decoded claims (uid plus custom claims such as admin/superadmin)

        Raises:
            Whatever firebase_admin.auth raises for invalid, expired or revoked tokens
        """
        return auth.verify_id_token(id_token, app=self.app)

    def create_user(self, email: str, password: str, display_name: Optional[str] = None):
        return auth.create_user(
            email=email,
            password=password,
            display_name=display_name,
            app=self.app
        )

    def set_custom_user_claims(self, uid: str, claims: Optional[Dict[str, Any]]) -> None:
        auth.set_custom_user_claims(uid, claims, app=self.app)

    def get_user(self, uid: str):
        return auth.get_user(uid, app=self.app)

    def get_user_by_email(self, email: str):
        return auth.get_user_by_email(email, app=self.app)

    def update_user(self, uid: str, **kwargs):
        return auth.update_user(uid, app=self.app, **kwargs)

    def iter_users(self) -> Iterator[Any]:
        """Iterate every user, following page tokens."""
        page = auth.list_users(max_results=self.page_size, app=self.app)
        while page:
            for user in page.users:
                yield user
            page = page.get_next_page()
