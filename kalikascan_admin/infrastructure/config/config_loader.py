"""
Centralised configuration loader.
"""
import os
import logging
from typing import Any, Dict, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Loads the static configuration modules and exposes environment-backed settings.
    """

    def __init__(self, load_env: bool = True, env_file: Optional[str] = None):
        """
        Initialise the loader.

        Args:
            load_env: Load environment variables from .env
            env_file: Path to a .env file
        """
        self.config = {}

        if load_env:
            load_dotenv(dotenv_path=env_file)

        self._load_all_configs()

    def _load_all_configs(self) -> None:
        """Load every configuration module."""
        from . import cache_config, firestore_config, limits_config

        self.config['firestore'] = {
            'collections': firestore_config.COLLECTIONS,
            'counters': firestore_config.COUNTER_FIELDS,
        }
        self.config['cache'] = {
            'geocode_ttl': int(os.getenv('GEOCODE_CACHE_TTL', cache_config.GEOCODE_TTL)),
            'key_prefixes': cache_config.KEY_PREFIXES,
            'geocode_key_precision': cache_config.GEOCODE_KEY_PRECISION,
        }
        self.config['limits'] = {
            'lists': limits_config.LIST_LIMITS,
            'clamps': limits_config.QUERY_CLAMPS,
            'user_lookup_chunk': limits_config.USER_LOOKUP_CHUNK,
            'batch_write_limit': limits_config.BATCH_WRITE_LIMIT,
            'auth_list_page_size': limits_config.AUTH_LIST_PAGE_SIZE,
            'disease_top_size': limits_config.DISEASE_TOP_SIZE,
        }

        logger.info(f"Loaded configuration modules: {', '.join(self.config.keys())}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a configuration value by dotted key.

        Args:
            key: Dotted key (e.g. 'limits.lists.plant_scans')
            default: Value returned when the key is missing

        Returns:
            The configuration value
        """
        if not key:
            return default

        current = self.config
        for part in key.split('.'):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def collection(self, name: str) -> str:
        """Resolve a logical collection name to its Firestore name."""
        return self.get(f'firestore.collections.{name}', name)

    def clamp(self, name: str, raw_value: Any) -> int:
        """
        Clamp a numeric query parameter to its configured range.

        Non-numeric input falls back to the default.

        Args:
            name: Entry in limits.clamps (e.g. 'daily_days')
            raw_value: Value from the query string

        Returns:
            The clamped integer
        """
        default, low, high = self.get(f'limits.clamps.{name}', (30, 1, 365))
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            return default
        if value != value or value in (float('inf'), float('-inf')):
            return default
        return int(min(max(value, low), high))

    def get_firebase_credentials(self) -> Dict[str, str]:
        """
        Firebase Admin service account fields.

        The private key is usually stored with literal "\\n" sequences.

        Returns:
            Dict with project_id, client_email, private_key and credentials_path
        """
        return {
            'project_id': os.getenv('FIREBASE_ADMIN_PROJECT_ID', ''),
            'client_email': os.getenv('FIREBASE_ADMIN_CLIENT_EMAIL', ''),
            'private_key': os.getenv('FIREBASE_ADMIN_PRIVATE_KEY', '').replace('\\n', '\n'),
            'credentials_path': os.getenv('FIREBASE_CREDENTIALS_PATH', ''),
        }

    def get_cloudinary_credentials(self) -> Dict[str, str]:
        return {
            'cloud_name': os.getenv('CLOUDINARY_CLOUD_NAME', ''),
            'api_key': os.getenv('CLOUDINARY_API_KEY', ''),
            'api_secret': os.getenv('CLOUDINARY_API_SECRET', ''),
        }

    def get_plant_id_settings(self) -> Dict[str, Any]:
        return {
            'api_key': os.getenv('PLANT_ID_API_KEY', ''),
            'base_url': os.getenv('PLANT_ID_API_URL', 'https://plant.id/api/v3'),
            'timeout': int(os.getenv('PLANT_ID_TIMEOUT', 30)),
        }

    def get_geocode_settings(self) -> Dict[str, Any]:
        return {
            'url': os.getenv('NOMINATIM_URL', 'https://nominatim.openstreetmap.org/reverse'),
            'user_agent': os.getenv('GEOCODE_USER_AGENT', 'KalikaScan Admin (reverse-geocode)'),
            'timeout': int(os.getenv('GEOCODE_TIMEOUT', 15)),
            'cache_backend': os.getenv('GEOCODE_CACHE_BACKEND', 'memory').lower(),
        }

    def get_redis_connection_params(self) -> Dict[str, Any]:
        """
        Redis connection parameters.

        Returns:
            Dict with host, port, db and password
        """
        return {
            'host': os.getenv('REDIS_HOST', 'localhost'),
            'port': int(os.getenv('REDIS_PORT', 6379)),
            'db': int(os.getenv('REDIS_DB', 0)),
            'password': os.getenv('REDIS_PASSWORD', None)
        }
