# tests/mocks/auth_mock.py
"""
Stand-in for FirebaseAuthClient backed by dicts.
"""
import itertools
from types import SimpleNamespace

from firebase_admin import auth


def make_user(uid, email=None, display_name=None, claims=None, disabled=False, photo_url=None,
              created_ms=1735689600000, last_sign_in_ms=None):
    return SimpleNamespace(
        uid=uid,
        email=email,
        display_name=display_name,
        photo_url=photo_url,
        disabled=disabled,
        custom_claims=claims,
        user_metadata=SimpleNamespace(
            creation_timestamp=created_ms,
            last_sign_in_timestamp=last_sign_in_ms,
        ),
    )


class FakeAuthClient:
    """
    ``tokens`` maps an ID token to its decoded claims; any other token is
    rejected the way firebase_admin rejects a bad token.
    """

    def __init__(self, tokens=None, users=None):
        self.tokens = dict(tokens or {})
        self.users = {user.uid: user for user in (users or [])}
        self.updates = []
        self._uids = (f"new-uid-{n}" for n in itertools.count(1))

    def verify_id_token(self, id_token):
        if id_token not in self.tokens:
            raise auth.InvalidIdTokenError("Token signature invalid")
        return dict(self.tokens[id_token])

    def create_user(self, email, password, display_name=None):
        if any(user.email == email for user in self.users.values()):
            raise auth.EmailAlreadyExistsError("Email exists", None, None)
        if len(password) < 6:
            raise ValueError("Invalid password string. Password must be a string at least 6 characters long.")
        user = make_user(next(self._uids), email=email, display_name=display_name)
        self.users[user.uid] = user
        return user

    def set_custom_user_claims(self, uid, claims):
        self.users[uid].custom_claims = claims

    def get_user(self, uid):
        if uid not in self.users:
            raise auth.UserNotFoundError(f"No user record found for the provided user ID: {uid}")
        return self.users[uid]

    def get_user_by_email(self, email):
        for user in self.users.values():
            if user.email == email:
                return user
        raise auth.UserNotFoundError(f"No user record found for the provided email: {email}")

    def update_user(self, uid, **kwargs):
        user = self.get_user(uid)
        for key, value in kwargs.items():
            setattr(user, key, value)
        self.updates.append((uid, kwargs))
        return user

    def iter_users(self):
        return iter(list(self.users.values()))
