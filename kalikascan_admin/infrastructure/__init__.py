# Avoid circular imports
__all__ = ["ServiceFactory"]

# ServiceFactory is imported lazily
def get_service_factory():
    from .factory import ServiceFactory
    return ServiceFactory()
