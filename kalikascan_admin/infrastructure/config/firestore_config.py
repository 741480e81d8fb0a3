"""
Firestore layout used by the mobile app and the admin dashboard.
"""

COLLECTIONS = {
    "plant_scans": "plant_scans",
    "map_posts": "map_scans",
    "health_assessments": "health_assessments",
    "expert_applications": "expert_applications",
    "users": "users",
    "admins": "admins",
    "analytics": "analytics",
}

# Subcollections
MAP_POST_COMMENTS = "comments"
MAP_POST_REPLIES = "replies"
ANALYTICS_DAILY = "daily"
ANALYTICS_DISEASE_TOP = "diseaseTop"
ANALYTICS_DISEASES = "diseases"

# analytics/global document
ANALYTICS_GLOBAL_DOC = "global"

# Counter fields touched when a record is deleted.
# Each entry: global counters, daily counters, "last activity" field, timestamp to recompute it from.
COUNTER_FIELDS = {
    "plant_scans": {
        "global_total": "totalPlantScans",
        "global_success": "totalPlantScanSuccess",
        "global_fail": "totalPlantScanFail",
        "daily_total": "plantScans",
        "daily_success": "successCount",
        "daily_fail": "failCount",
        "last_activity": "lastPlantScanAt",
        "user_counter": "scanCount",
    },
    "map_posts": {
        "global_total": "totalMapPosts",
        "daily_total": "mapPosts",
        "last_activity": "lastMapPostAt",
    },
    "health_assessments": {
        "global_total": "totalHealthAssessments",
        "global_success": "totalHealthSuccess",
        "global_fail": "totalHealthFail",
        "daily_total": "healthAssessments",
        "daily_success": "healthSuccessCount",
        "daily_fail": "healthFailCount",
        "last_activity": "lastHealthAssessmentAt",
    },
}

# Field the "last activity" timestamp is recomputed from
LAST_ACTIVITY_SOURCE_FIELD = "createdAt"
