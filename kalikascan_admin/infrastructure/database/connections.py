"""
Connections to Firebase and Redis.
"""
import os
import logging
import firebase_admin
from firebase_admin import credentials, firestore
from kalikascan_admin.infrastructure.config.config_loader import ConfigLoader
from .redis_client import RedisClient

logger = logging.getLogger(__name__)

# Module level connection holders
redis_client = None
firebase_app = None


async def init_database_connections():
    """Initialise the connections needed at startup."""
    global firebase_app

    firebase_app = init_firebase_connection()

    logger.info("All database connections initialized")


def _build_credentials(firebase_settings=None):
    """
    Build Firebase Admin credentials.

    Inline service account variables take precedence over a credentials file.
    """
    if firebase_settings is None:
        firebase_settings = ConfigLoader(load_env=False).get_firebase_credentials()

    project_id = firebase_settings["project_id"]
    if project_id and firebase_settings["client_email"] and firebase_settings["private_key"]:
        return credentials.Certificate({
            "type": "service_account",
            "project_id": project_id,
            "client_email": firebase_settings["client_email"],
            "private_key": firebase_settings["private_key"],
            "token_uri": "https://oauth2.googleapis.com/token",
        }), project_id

    cred_path = firebase_settings["credentials_path"]
    if not cred_path or not os.path.exists(cred_path):
        logger.error(f"Firebase credentials not configured (path: {cred_path})")
        raise FileNotFoundError(
            "Set FIREBASE_ADMIN_PROJECT_ID, FIREBASE_ADMIN_CLIENT_EMAIL and "
            "FIREBASE_ADMIN_PRIVATE_KEY, or FIREBASE_CREDENTIALS_PATH"
        )

    return credentials.Certificate(cred_path), None


def init_firebase_connection():
    """Initialise the Firebase Admin app once per process."""
    global firebase_app

    try:
        if firebase_app is not None:
            logger.info("Firebase app already initialized")
            return firebase_app

        if firebase_admin._apps:
            logger.info("Using existing Firebase app")
            firebase_app = firebase_admin.get_app()
            return firebase_app

        cred, project_id = _build_credentials()
        options = {"projectId": project_id} if project_id else None
        firebase_app = firebase_admin.initialize_app(cred, options)

        logger.info(f"Firebase connection established (project: {firebase_app.project_id})")
        return firebase_app

    except Exception as e:
        logger.error(f"Failed to connect to Firebase: {str(e)}")
        raise


def init_redis_connection(params):
    """
    Open a Redis connection.

    Args:
        params: Dict with host, port, db and password
    """
    try:
        client = RedisClient(
            host=params["host"],
            port=params["port"],
            db=params["db"],
            password=params.get("password")
        )

        logger.info(f"Redis connection established: {params['host']}:{params['port']}")
        return client

    except Exception as e:
        logger.error(f"Failed to connect to Redis: {str(e)}")
        raise


def get_firebase_app():
    """Return the Firebase app, initialising it on first use."""
    global firebase_app
    if firebase_app is None:
        firebase_app = init_firebase_connection()
    return firebase_app


def get_firestore_db():
    """Return a Firestore client bound to the Firebase app."""
    return firestore.client(app=get_firebase_app())


def get_redis_client(params):
    """Return the shared Redis client, connecting on first use."""
    global redis_client
    if redis_client is None:
        redis_client = init_redis_connection(params)
    return redis_client
