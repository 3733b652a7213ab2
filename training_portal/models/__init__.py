# models/__init__.py
from .base import BaseModel
from .user import User, RoleType
from .category import Category
from .training import Training, TrainingAttachment, TrainingStatus, RegistrationMethod, TargetAudience
from .registration import Registration, EnrollmentStatus, AttendanceStatus
from .resource import Resource, ResourceType
from .training_update import TrainingUpdate, TrainingUpdateType
from .page import PageContent, PageVersion

__all__ = [
    'BaseModel',
    'User',
    'RoleType',
    'Category',
    'Training',
    'TrainingAttachment',
    'TrainingStatus',
    'RegistrationMethod',
    'TargetAudience',
    'Registration',
    'EnrollmentStatus',
    'AttendanceStatus',
    'Resource',
    'ResourceType',
    'TrainingUpdate',
    'TrainingUpdateType',
    'PageContent',
    'PageVersion',
]
