"""
Admin account management on top of Firebase Auth custom claims.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import auth, firestore

from kalikascan_admin.core.records.normalizers import to_iso
from kalikascan_admin.infrastructure.exceptions import ConflictError, ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Admin"


def _claims(user) -> Dict[str, Any]:
    return getattr(user, "custom_claims", None) or {}


def admin_row(user) -> Dict[str, Any]:
    metadata = getattr(user, "user_metadata", None)
    return {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "photoURL": user.photo_url,
        "disabled": bool(user.disabled),
        "createdAt": to_iso(getattr(metadata, "creation_timestamp", None)),
        "lastSignIn": to_iso(getattr(metadata, "last_sign_in_timestamp", None)),
        "role": "superadmin" if _claims(user).get("superadmin") else "admin",
    }


def _admin_sort_key(row: Dict[str, Any]):
    name = row.get("displayName") or row.get("email") or ""
    return (0 if row["role"] == "superadmin" else 1, name.casefold())


class AdminAccountService:

    def __init__(self, auth_client, firestore_client, config_loader):
        self.auth = auth_client
        self.firestore = firestore_client
        self.admins_collection = config_loader.collection("admins")

    def create_admin(self, email: Optional[str], password: Optional[str], display_name: Optional[str],
                     created_by: str) -> Dict[str, Any]:
        """
        Create a Firebase Auth user with the admin claim and record its profile.

        Returns:
            {"ok": True, "uid": <new uid>}
        """
        if not email or not password:
            raise ValidationError("Email and password required")

        display_name = display_name or DEFAULT_DISPLAY_NAME
        try:
            user = self.auth.create_user(email, password, display_name)
        except auth.EmailAlreadyExistsError:
            raise ConflictError(f"An account already exists for {email}")
        except ValueError as e:
            # firebase_admin validates email and password format locally
            raise ValidationError(str(e))

        self.auth.set_custom_user_claims(user.uid, {"admin": True})
        self.firestore.collection(self.admins_collection).document(user.uid).set({
            "uid": user.uid,
            "email": email,
            "displayName": display_name,
            "role": "admin",
            "createdAt": firestore.SERVER_TIMESTAMP,
            "createdBy": created_by,
        })

        logger.info(f"Admin {user.uid} ({email}) created by {created_by}")
        return {"ok": True, "uid": user.uid}

    def list_admins(self) -> List[Dict[str, Any]]:
        """Every Auth user holding the admin claim, superadmins first."""
        admins = [admin_row(user) for user in self.auth.iter_users() if _claims(user).get("admin")]
        admins.sort(key=_admin_sort_key)
        return admins

    def toggle_disabled(self, caller_uid: str, uid: Optional[str], disabled: Any) -> Dict[str, Any]:
        if not uid or not isinstance(disabled, bool):
            raise ValidationError("Invalid payload. Expected { uid, disabled }")
        if caller_uid == uid:
            raise ValidationError("You cannot disable your own account.")

        try:
            target = self.auth.get_user(uid)
        except auth.UserNotFoundError:
            raise ResourceNotFoundError("User not found", resource_type="user", resource_id=uid)

        if _claims(target).get("superadmin"):
            raise ValidationError("You cannot disable a superadmin.")

        self.auth.update_user(uid, disabled=disabled)
        logger.info(f"User {uid} {'disabled' if disabled else 'enabled'} by {caller_uid}")
        return {"ok": True, "uid": uid, "disabled": disabled}

    def grant_admin(self, email: str, superadmin: bool = False) -> str:
        """
        Give an existing user the admin claim, keeping the claims it already has.

        Returns:
            The user's uid
        """
        try:
            user = self.auth.get_user_by_email(email)
        except auth.UserNotFoundError:
            raise ResourceNotFoundError(f"No user with email {email}", resource_type="user", resource_id=email)

        claims = dict(_claims(user))
        claims["admin"] = True
        if superadmin:
            claims["superadmin"] = True
        self.auth.set_custom_user_claims(user.uid, claims)

        logger.info(f"Granted {'superadmin' if superadmin else 'admin'} claim to {user.uid} ({email})")
        return user.uid
