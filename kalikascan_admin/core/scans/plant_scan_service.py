"""
Plant scan administration: listing, deletion and address correction.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from kalikascan_admin.core.records.normalizers import coordinate, get_path, to_jsonable
from kalikascan_admin.core.users.user_directory import scan_user_summary
from kalikascan_admin.infrastructure.exceptions import ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def scan_access_token(data: Dict[str, Any]) -> Optional[str]:
    """Plant.id access token, wherever the app version stored it."""
    for path in ("accessToken", "plantIdAccessToken", "plantId.accessToken"):
        token = get_path(data, path)
        if token:
            return token
    return None


def flatten_scan(doc_id: str, x: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce a plant scan document to the fields the dashboard shows."""
    image_urls = x.get("imageUrls") if isinstance(x.get("imageUrls"), list) else []
    confidence = x.get("confidence")
    if confidence is None:
        confidence = get_path(x, "topSuggestion.probability")

    return {
        "id": doc_id,
        "uid": x.get("uid"),
        "createdDay": x.get("createdDay"),
        "createdAtLocal": x.get("createdAtLocal"),
        "plantName": get_path(x, "topSuggestion.name"),
        "confidence": confidence,
        "isPlantBinary": get_path(x, "isPlant.binary"),
        "isPlantProbability": get_path(x, "isPlant.probability"),
        "latitude": coordinate(x.get("location"), "latitude"),
        "longitude": coordinate(x.get("location"), "longitude"),
        "addressText": x.get("addressText"),
        "imageUrl": image_urls[0] if image_urls else None,
        "imageUrls": image_urls,
        "accessToken": x.get("accessToken"),
        "provider": x.get("provider"),
        "modelVersion": x.get("modelVersion"),
        "plantIdStatus": x.get("plantIdStatus"),
        "success": x.get("success"),
        "topSuggestion": x.get("topSuggestion"),
        "user": None,
    }


class PlantScanService:

    KIND = "plant_scans"

    def __init__(self, firestore_client, user_directory, plant_id_client, reconciler, config_loader):
        self.firestore = firestore_client
        self.users = user_directory
        self.plant_id = plant_id_client
        self.reconciler = reconciler
        self.collection_name = config_loader.collection("plant_scans")
        self.users_collection = config_loader.collection("users")
        self.list_limit = config_loader.get("limits.lists.plant_scans", 500)
        self.user_chunk = config_loader.get("limits.user_lookup_chunk.by_document", 30)

    def list_scans(self) -> List[Dict[str, Any]]:
        """
        Newest scans first, each joined with its owner's profile.
        """
        query = (
            self.firestore.collection(self.collection_name)
            .order_by("createdAtLocal", direction=firestore.Query.DESCENDING)
            .limit(self.list_limit)
        )
        scans = [flatten_scan(snap.id, snap.to_dict() or {}) for snap in query.stream()]

        profiles = self.users.fetch_profiles((s["uid"] for s in scans), chunk_size=self.user_chunk)
        for scan in scans:
            uid = scan["uid"]
            scan["user"] = scan_user_summary(uid, profiles[uid]) if uid in profiles else None

        return to_jsonable(scans)

    def delete_scan(self, scan_id: str) -> Dict[str, Any]:
        """
        Delete a scan, its user mirror and its Plant.id identification, then
        roll back the analytics counters it contributed to.
        """
        global_ref = self.firestore.collection(self.collection_name).document(scan_id)
        data = self.firestore.get_data(global_ref)
        if data is None:
            raise ResourceNotFoundError("Scan not found", resource_type="plant_scan", resource_id=scan_id)

        uid = data.get("uid") or None

        # Upstream cleanup never blocks the Firestore delete
        self.plant_id.purge(scan_access_token(data))

        operations = [("delete", global_ref)]
        user_ref = None
        if uid:
            user_ref = self.firestore.collection(self.users_collection).document(uid)
            operations.append(("delete", user_ref.collection(self.collection_name).document(scan_id)))

        operations.extend(self.reconciler.decrement_writes(self.KIND, data, user_ref=user_ref))

        # Everything fits one batch, so the delete and the counters land together
        self.firestore.commit_in_chunks(operations)
        self.reconciler.recompute_last_activity(self.KIND, self.collection_name)

        logger.info(f"Deleted plant scan {scan_id} (uid={uid})")
        return {
            "ok": True,
            "deletedId": scan_id,
            "analyticsUpdated": True,
        }

    def set_address(self, scan_id: str, address_text: Any) -> Dict[str, Any]:
        if not scan_id or not isinstance(address_text, str) or not address_text.strip():
            raise ValidationError("Invalid payload", field="addressText")

        ref = self.firestore.collection(self.collection_name).document(scan_id)
        if self.firestore.get_data(ref) is None:
            raise ResourceNotFoundError("Scan not found", resource_type="plant_scan", resource_id=scan_id)

        ref.update({"addressText": address_text})
        logger.info(f"Updated address of plant scan {scan_id}")
        return {"ok": True}
