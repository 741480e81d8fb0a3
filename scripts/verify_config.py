#!/usr/bin/env python3
"""
Check that the environment is ready to run the admin service.
"""
import os
import sys

import requests
from dotenv import load_dotenv

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

load_dotenv()

SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD")


def _display(var: str, value: str) -> str:
    if any(marker in var for marker in SECRET_MARKERS):
        return value[:5] + "..." if len(value) > 5 else "***"
    return value


def check_env_vars():
    """Check the required environment variables."""
    print("=== Checking Environment Variables ===")

    inline_firebase = ["FIREBASE_ADMIN_PROJECT_ID", "FIREBASE_ADMIN_CLIENT_EMAIL", "FIREBASE_ADMIN_PRIVATE_KEY"]
    required_vars = [
        "CLOUDINARY_CLOUD_NAME",
        "CLOUDINARY_API_KEY",
        "CLOUDINARY_API_SECRET",
        "PLANT_ID_API_KEY",
    ]
    if not os.getenv("FIREBASE_CREDENTIALS_PATH"):
        required_vars = inline_firebase + required_vars

    missing_vars = []
    for var in required_vars:
        value = os.getenv(var)
        if not value:
            missing_vars.append(var)
            print(f"❌ {var}: NOT SET")
        else:
            print(f"✅ {var}: {_display(var, value)}")

    return len(missing_vars) == 0


def check_firebase_connection():
    """Initialise Firebase Admin and read the global analytics document."""
    print("\n=== Checking Firebase Connection ===")

    from kalikascan_admin.infrastructure import get_service_factory

    try:
        factory = get_service_factory()
        reconciler = factory.create_counter_reconciler()
        data = factory.create_firestore_client().get_data(reconciler.global_ref())
        print("✅ Firestore connection successful")
        print(f"   analytics/global: {'found' if data is not None else 'not created yet'}")
        return True
    except Exception as e:
        print(f"❌ Firebase connection failed: {str(e)}")
        return False


def check_plant_id():
    """Check that the Plant.id key is accepted."""
    print("\n=== Checking Plant.id ===")

    api_key = os.getenv("PLANT_ID_API_KEY")
    base_url = os.getenv("PLANT_ID_API_URL", "https://plant.id/api/v3").rstrip("/")
    if not api_key:
        print("❌ PLANT_ID_API_KEY not set")
        return False

    try:
        response = requests.get(f"{base_url}/usage_info", headers={"Api-Key": api_key}, timeout=30)
    except requests.RequestException as e:
        print(f"❌ Plant.id request failed: {str(e)}")
        return False

    if response.status_code in (401, 403):
        print(f"❌ Plant.id rejected the API key ({response.status_code})")
        return False

    print(f"✅ Plant.id reachable ({response.status_code})")
    return True


def check_redis_connection():
    """Check Redis when it backs the geocode cache."""
    print("\n=== Checking Redis Connection ===")

    if os.getenv("GEOCODE_CACHE_BACKEND", "memory").lower() != "redis":
        print("✅ Redis not used (in-memory geocode cache)")
        return True

    import redis

    host = os.getenv("REDIS_HOST", "localhost")
    port = int(os.getenv("REDIS_PORT", 6379))
    try:
        redis.Redis(host=host, port=port, password=os.getenv("REDIS_PASSWORD"), decode_responses=True).ping()
        print("✅ Redis connection successful")
        print(f"   Host: {host}:{port}")
        return True
    except redis.RedisError as e:
        print(f"❌ Redis connection failed: {str(e)}")
        return False


def main():
    print("KalikaScan Admin Service - Configuration Verification")
    print("=" * 50)

    results = {
        "env_vars": check_env_vars(),
        "firebase": check_firebase_connection(),
        "plant_id": check_plant_id(),
        "redis": check_redis_connection()
    }

    print("\n=== Summary ===")
    for component, passed in results.items():
        print(f"{component}: {'✅ PASSED' if passed else '❌ FAILED'}")

    if all(results.values()):
        print("\n✅ All checks passed! The service is ready to run.")
    else:
        print("\n❌ Some checks failed. Please fix the issues above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
