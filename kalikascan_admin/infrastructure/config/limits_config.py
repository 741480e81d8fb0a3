"""
Query limits and clamps for the admin API.
"""

LIST_LIMITS = {
    "plant_scans": 500,
    "health_assessments": 1000,
    "expert_applications": 200,
}

# (default, min, max) for query parameters
QUERY_CLAMPS = {
    "daily_days": (30, 1, 365),
    "disease_days": (30, 1, 365),
    "users_take": (10, 1, 50),
}

# Number of user documents fetched per lookup round
USER_LOOKUP_CHUNK = {
    "by_document": 30,
    "by_in_query": 10,
}

# Firestore rejects batches with more than 500 writes
BATCH_WRITE_LIMIT = 450

# Auth users listed per page
AUTH_LIST_PAGE_SIZE = 1000

# Disease ranking size
DISEASE_TOP_SIZE = 10
