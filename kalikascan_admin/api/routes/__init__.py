"""
Register every API route.
"""


def register_routes(app):
    """
    Include all routers in the FastAPI app.

    Args:
        app: FastAPI application
    """
    # Imported here to avoid circular imports
    from .admin_routes import router as admin_router
    from .plant_scan_routes import router as plant_scan_router
    from .map_post_routes import router as map_post_router
    from .health_assessment_routes import router as health_assessment_router
    from .expert_application_routes import router as expert_application_router
    from .analytics_routes import router as analytics_router
    from .notification_routes import router as notification_router
    from .geocode_routes import router as geocode_router
    from .profile_routes import router as profile_router

    app.include_router(admin_router, prefix="/api/admin", tags=["admins"])
    app.include_router(plant_scan_router, prefix="/api/admin/plant-scans", tags=["plant scans"])
    app.include_router(map_post_router, prefix="/api/admin/map-posts", tags=["map posts"])
    app.include_router(health_assessment_router, prefix="/api/admin/health-assessments", tags=["health assessments"])
    app.include_router(expert_application_router, prefix="/api/admin/expert-applications", tags=["expert applications"])
    app.include_router(analytics_router, prefix="/api/admin/analytics", tags=["analytics"])
    app.include_router(notification_router, prefix="/api/admin/notifications", tags=["notifications"])
    app.include_router(geocode_router, prefix="/api/geocode", tags=["geocoding"])
    app.include_router(profile_router, prefix="/api/profile", tags=["profile"])
