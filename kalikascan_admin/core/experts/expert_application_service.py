"""
Expert application review.

An application is stored twice, in ``expert_applications/{id}`` and in
``users/{uid}/expert_applications/{id}``. A review moves both copies from
``pending`` to ``approved`` or ``rejected`` exactly once and sets the
applicant's role, all inside one Firestore transaction.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from kalikascan_admin.core.records.normalizers import as_num, to_iso
from kalikascan_admin.infrastructure.exceptions import ConflictError, ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)

REVIEW_STATUSES = ("approved", "rejected")
ROLE_FOR_STATUS = {"approved": "expert", "rejected": "regular"}


def application_row(snap) -> Dict[str, Any]:
    data = snap.to_dict() or {}
    return {
        "id": snap.id,
        "uid": data.get("uid"),
        "displayName": data.get("displayName"),
        "email": data.get("email"),
        "phoneNumber": data.get("phoneNumber"),
        "location": data.get("location"),
        "organization": data.get("organization"),
        "profession": data.get("profession"),
        "specialization": data.get("specialization"),
        "yearsExperience": as_num(data.get("yearsExperience")),
        "credentialsLink": data.get("credentialsLink"),
        "note": data.get("note"),
        "adminNote": data.get("adminNote"),
        "status": data.get("status") or "pending",
        # Older applications were written without these fields
        "createdAt": to_iso(data.get("createdAt")) or to_iso(getattr(snap, "create_time", None)),
        "reviewedAt": to_iso(data.get("reviewedAt")) or to_iso(getattr(snap, "update_time", None)),
        "reviewedBy": data.get("reviewedBy"),
    }


def _review_in_transaction(transaction, app_ref, user_ref, mirror_ref, uid: str,
                           status: str, admin_note: Optional[str], reviewer_uid: str) -> str:
    # All reads happen before any write, as Firestore transactions require
    app_snap = app_ref.get(transaction=transaction)
    user_snap = user_ref.get(transaction=transaction)
    mirror_snap = mirror_ref.get(transaction=transaction)

    if not app_snap.exists:
        raise ResourceNotFoundError("Global application not found", resource_type="expert_application",
                                    resource_id=app_ref.id)
    if not user_snap.exists:
        raise ResourceNotFoundError("User not found", resource_type="user", resource_id=uid)
    if not mirror_snap.exists:
        raise ResourceNotFoundError("User application doc not found", resource_type="expert_application",
                                    resource_id=mirror_ref.id)

    app_data = app_snap.to_dict() or {}
    mirror_data = mirror_snap.to_dict() or {}

    if app_data.get("uid") != uid:
        raise ValidationError("UID mismatch (global application)", field="uid")
    if mirror_data.get("uid") != uid:
        raise ValidationError("UID mismatch (user application)", field="uid")

    current_status = app_data.get("status") or "pending"
    if current_status != "pending":
        raise ConflictError(f"Already reviewed ({current_status})")

    patch = {
        "status": status,
        "adminNote": admin_note,
        "reviewedAt": firestore.SERVER_TIMESTAMP,
        "reviewedBy": reviewer_uid,
    }
    transaction.update(app_ref, patch)
    transaction.update(mirror_ref, patch)
    transaction.set(
        user_ref,
        {"role": ROLE_FOR_STATUS[status], "updatedAt": firestore.SERVER_TIMESTAMP},
        merge=True,
    )
    return current_status


class ExpertApplicationService:

    def __init__(self, firestore_client, config_loader):
        self.firestore = firestore_client
        self.collection_name = config_loader.collection("expert_applications")
        self.users_collection = config_loader.collection("users")
        self.list_limit = config_loader.get("limits.lists.expert_applications", 200)

    def list_applications(self) -> List[Dict[str, Any]]:
        query = (
            self.firestore.collection(self.collection_name)
            .order_by("createdAt", direction=firestore.Query.DESCENDING)
            .limit(self.list_limit)
        )
        return [application_row(snap) for snap in query.stream()]

    def review(self, application_id: str, uid: str, status: str, admin_note: Optional[str],
               reviewer_uid: str) -> Dict[str, Any]:
        """
        Approve or reject a pending application.

        Args:
            application_id: Application document id
            uid: Applicant, must own both copies of the application
            status: 'approved' or 'rejected'
            admin_note: Optional note shown to the applicant
            reviewer_uid: Admin performing the review

        Returns:
            {"ok": True}

        Raises:
            ValidationError: Bad input or UID mismatch
            ResourceNotFoundError: Application, mirror or user missing
            ConflictError: Application was already reviewed
        """
        if not application_id or not uid or not status:
            raise ValidationError("Missing fields")
        if status not in REVIEW_STATUSES:
            raise ValidationError("Invalid status", field="status")

        app_ref = self.firestore.collection(self.collection_name).document(application_id)
        user_ref = self.firestore.collection(self.users_collection).document(uid)
        mirror_ref = user_ref.collection(self.collection_name).document(application_id)

        self.firestore.run_in_transaction(
            _review_in_transaction,
            app_ref, user_ref, mirror_ref, uid, status, admin_note, reviewer_uid,
        )

        logger.info(f"Expert application {application_id} of {uid} {status} by {reviewer_uid}")
        return {"ok": True}
