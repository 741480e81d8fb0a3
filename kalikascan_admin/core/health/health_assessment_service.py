"""
Plant health assessment administration.
"""
import logging
from typing import Any, Dict, List

from firebase_admin import firestore

from kalikascan_admin.core.records.normalizers import as_bool, as_num, as_str, as_str_list, coordinate, to_jsonable
from kalikascan_admin.core.scans.plant_scan_service import scan_access_token
from kalikascan_admin.core.users.user_directory import post_user_summary
from kalikascan_admin.infrastructure.exceptions import ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def assessment_row(doc_id: str, uid: str, x: Dict[str, Any]) -> Dict[str, Any]:
    location = x.get("location")
    suggestions = x.get("diseaseSuggestions")
    return {
        "id": doc_id,
        "uid": uid,
        "createdDay": as_str(x.get("createdDay")),
        "createdAt": x.get("createdAt"),
        "user": None,
        "imageUrls": as_str_list(x.get("imageUrls")),
        "isHealthyBinary": as_bool(x.get("isHealthyBinary")),
        "isHealthyProbability": as_num(x.get("isHealthyProbability")),
        "isPlantProbability": as_num(x.get("isPlantProbability")),
        "confidence": as_num(x.get("confidence")),
        "diseaseName": as_str(x.get("diseaseName")),
        "topDisease": x.get("topDisease"),
        "diseaseSuggestions": suggestions if isinstance(suggestions, list) else [],
        "questionText": as_str(x.get("questionText")),
        "addressText": as_str(x.get("addressText")),
        "location": {
            "latitude": coordinate(location, "latitude"),
            "longitude": coordinate(location, "longitude"),
        } if location else None,
        "success": as_bool(x.get("success")),
    }


class HealthAssessmentService:

    KIND = "health_assessments"

    def __init__(self, firestore_client, user_directory, plant_id_client, reconciler, config_loader):
        self.firestore = firestore_client
        self.users = user_directory
        self.plant_id = plant_id_client
        self.reconciler = reconciler
        self.collection_name = config_loader.collection("health_assessments")
        self.users_collection = config_loader.collection("users")
        self.list_limit = config_loader.get("limits.lists.health_assessments", 1000)
        self.user_chunk = config_loader.get("limits.user_lookup_chunk.by_in_query", 10)

    def list_assessments(self) -> List[Dict[str, Any]]:
        """
        Newest assessments first. Records without an owner are skipped.
        """
        query = (
            self.firestore.collection(self.collection_name)
            .order_by("createdAt", direction=firestore.Query.DESCENDING)
            .limit(self.list_limit)
        )

        rows = []
        for snap in query.stream():
            data = snap.to_dict() or {}
            uid = as_str(data.get("uid"))
            if not uid:
                continue
            rows.append(assessment_row(snap.id, uid, data))

        profiles = self.users.fetch_profiles((r["uid"] for r in rows), chunk_size=self.user_chunk)
        for row in rows:
            profile = profiles.get(row["uid"])
            row["user"] = post_user_summary(profile) if profile is not None else None

        return to_jsonable(rows)

    def delete_assessment(self, assessment_id: str) -> Dict[str, Any]:
        """
        Delete an assessment and its user mirror, clean up Plant.id and
        roll back the health counters.
        """
        global_ref = self.firestore.collection(self.collection_name).document(assessment_id)
        data = self.firestore.get_data(global_ref)
        if data is None:
            raise ResourceNotFoundError(
                "Assessment not found", resource_type="health_assessment", resource_id=assessment_id
            )

        uid = data.get("uid") or None
        self.plant_id.purge(scan_access_token(data))

        operations = [("delete", global_ref)]
        if uid:
            mirror_ref = (
                self.firestore.collection(self.users_collection).document(uid)
                .collection(self.collection_name).document(assessment_id)
            )
            operations.append(("delete", mirror_ref))
        operations.extend(self.reconciler.decrement_writes(self.KIND, data))

        self.firestore.commit_in_chunks(operations)
        self.reconciler.recompute_last_activity(self.KIND, self.collection_name)

        logger.info(f"Deleted health assessment {assessment_id} (uid={uid})")
        return {
            "ok": True,
            "deletedId": assessment_id,
            "deletedFromUser": bool(uid),
        }

    def set_address(self, assessment_id: str, address_text: Any) -> Dict[str, Any]:
        # Any string is accepted, including an empty one to clear the address
        if not assessment_id or not isinstance(address_text, str):
            raise ValidationError("assessmentId and addressText are required", field="addressText")

        self.firestore.collection(self.collection_name).document(assessment_id).set(
            {"addressText": address_text}, merge=True
        )
        logger.info(f"Updated address of health assessment {assessment_id}")
        return {"ok": True}
