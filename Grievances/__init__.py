from .models import (
    Grievance,
    GrievanceAttachment,
    GrievanceCategory,
    GrievanceStatus,
    GrievanceStatusHistory,
)
from .schemas import GrievanceCreate, GrievanceOut, GrievanceUpdate, StatusHistoryOut

__all__ = [
    'Grievance',
    'GrievanceAttachment',
    'GrievanceCategory',
    'GrievanceStatus',
    'GrievanceStatusHistory',
    'GrievanceCreate',
    'GrievanceOut',
    'GrievanceUpdate',
    'StatusHistoryOut',
]
