"""
Factory that builds and caches the clients and services of the application.
"""
import logging
from typing import Any, Dict

from .config.config_loader import ConfigLoader
from .database import FirestoreClient
from .database.connections import get_firebase_app, get_firestore_db, get_redis_client
from .cache import MemoryTTLCache, RedisTTLCache

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Creates service dependencies on first use and keeps them for the
    lifetime of the process.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super(ServiceFactory, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        logger.info("Initializing ServiceFactory")
        self.config_loader = ConfigLoader()
        self.services: Dict[str, Any] = {}
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Forget the singleton, so the next call builds a fresh factory."""
        cls._instance = None

    def _get_or_create(self, key: str, builder) -> Any:
        if key not in self.services:
            self.services[key] = builder()
            logger.info(f"Created {key}")
        return self.services[key]

    # Clients

    def create_firestore_client(self) -> FirestoreClient:
        return self._get_or_create("firestore_client", lambda: FirestoreClient(
            get_firestore_db(),
            batch_write_limit=self.config_loader.get("limits.batch_write_limit", 450)
        ))

    def create_auth_client(self):
        from kalikascan_admin.adapters.firebase import FirebaseAuthClient

        return self._get_or_create("auth_client", lambda: FirebaseAuthClient(
            app=get_firebase_app(),
            page_size=self.config_loader.get("limits.auth_list_page_size", 1000)
        ))

    def create_plant_id_client(self):
        from kalikascan_admin.adapters.plantid import PlantIdClient

        settings = self.config_loader.get_plant_id_settings()
        return self._get_or_create("plant_id_client", lambda: PlantIdClient(
            api_key=settings["api_key"],
            base_url=settings["base_url"],
            timeout=settings["timeout"]
        ))

    def create_media_client(self):
        from kalikascan_admin.adapters.media import CloudinaryMediaClient

        credentials = self.config_loader.get_cloudinary_credentials()
        return self._get_or_create("media_client", lambda: CloudinaryMediaClient(
            cloud_name=credentials["cloud_name"],
            api_key=credentials["api_key"],
            api_secret=credentials["api_secret"]
        ))

    def create_geocoder(self):
        from kalikascan_admin.adapters.geocoding import NominatimGeocoder

        settings = self.config_loader.get_geocode_settings()
        return self._get_or_create("geocoder", lambda: NominatimGeocoder(
            url=settings["url"],
            user_agent=settings["user_agent"],
            timeout=settings["timeout"]
        ))

    def create_geocode_cache(self):
        """In-memory by default, Redis when GEOCODE_CACHE_BACKEND=redis."""
        def build():
            ttl = self.config_loader.get("cache.geocode_ttl")
            if self.config_loader.get_geocode_settings()["cache_backend"] == "redis":
                redis_client = get_redis_client(self.config_loader.get_redis_connection_params())
                return RedisTTLCache(redis_client, ttl, prefix=self.config_loader.get("cache.key_prefixes.geocode", ""))
            return MemoryTTLCache(ttl)

        return self._get_or_create("geocode_cache", build)

    # Domain services

    def create_user_directory(self):
        from kalikascan_admin.core.users import UserDirectory

        return self._get_or_create("user_directory", lambda: UserDirectory(
            self.create_firestore_client(),
            users_collection=self.config_loader.collection("users")
        ))

    def create_counter_reconciler(self):
        from kalikascan_admin.core.analytics import CounterReconciler
        from .config.firestore_config import (
            ANALYTICS_DAILY,
            ANALYTICS_GLOBAL_DOC,
            LAST_ACTIVITY_SOURCE_FIELD,
        )

        return self._get_or_create("counter_reconciler", lambda: CounterReconciler(
            self.create_firestore_client(),
            self.config_loader.get("firestore.counters"),
            analytics_collection=self.config_loader.collection("analytics"),
            global_doc=ANALYTICS_GLOBAL_DOC,
            daily_collection=ANALYTICS_DAILY,
            source_field=LAST_ACTIVITY_SOURCE_FIELD
        ))

    def create_plant_scan_service(self):
        from kalikascan_admin.core.scans import PlantScanService

        return self._get_or_create("plant_scan_service", lambda: PlantScanService(
            self.create_firestore_client(),
            self.create_user_directory(),
            self.create_plant_id_client(),
            self.create_counter_reconciler(),
            self.config_loader
        ))

    def create_map_post_service(self):
        from kalikascan_admin.core.map_posts import MapPostService

        return self._get_or_create("map_post_service", lambda: MapPostService(
            self.create_firestore_client(),
            self.create_user_directory(),
            self.create_counter_reconciler(),
            self.config_loader
        ))

    def create_health_assessment_service(self):
        from kalikascan_admin.core.health import HealthAssessmentService

        return self._get_or_create("health_assessment_service", lambda: HealthAssessmentService(
            self.create_firestore_client(),
            self.create_user_directory(),
            self.create_plant_id_client(),
            self.create_counter_reconciler(),
            self.config_loader
        ))

    def create_expert_application_service(self):
        from kalikascan_admin.core.experts import ExpertApplicationService

        return self._get_or_create("expert_application_service", lambda: ExpertApplicationService(
            self.create_firestore_client(),
            self.config_loader
        ))

    def create_admin_account_service(self):
        from kalikascan_admin.core.admins import AdminAccountService

        return self._get_or_create("admin_account_service", lambda: AdminAccountService(
            self.create_auth_client(),
            self.create_firestore_client(),
            self.config_loader
        ))

    def create_analytics_service(self):
        from kalikascan_admin.core.analytics import AnalyticsService

        return self._get_or_create("analytics_service", lambda: AnalyticsService(
            self.create_firestore_client(),
            self.create_counter_reconciler(),
            self.config_loader
        ))

    def create_notification_service(self):
        from kalikascan_admin.core.notifications import NotificationService

        return self._get_or_create("notification_service", lambda: NotificationService(
            self.create_firestore_client(),
            self.config_loader
        ))

    def create_geocode_service(self):
        from kalikascan_admin.core.geocoding import GeocodeService

        return self._get_or_create("geocode_service", lambda: GeocodeService(
            self.create_geocoder(),
            self.create_geocode_cache(),
            precision=self.config_loader.get("cache.geocode_key_precision", 6)
        ))

    def create_profile_photo_service(self):
        from kalikascan_admin.core.profile import ProfilePhotoService

        return self._get_or_create("profile_photo_service", lambda: ProfilePhotoService(
            self.create_firestore_client(),
            self.create_media_client(),
            self.config_loader
        ))

    def create_report_service(self):
        from kalikascan_admin.core.reports import ReportService

        return self._get_or_create("report_service", lambda: ReportService(
            self.create_plant_scan_service(),
            self.create_map_post_service(),
            self.create_health_assessment_service(),
            self.create_analytics_service()
        ))

    def init_all_services(self) -> None:
        """Build the clients that must work before the first request."""
        self.create_firestore_client()
        self.create_auth_client()
        self.create_plant_id_client()
        self.create_media_client()
        self.create_geocode_service()
        logger.info("All services initialized")
