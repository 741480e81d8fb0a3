from .expert_application_service import ExpertApplicationService

__all__ = ["ExpertApplicationService"]
