from .health_assessment_service import HealthAssessmentService

__all__ = ["HealthAssessmentService"]
