from .organization import Organization, WeekStart
from .user import User, UserRole
from .client import Client
from .project import Project, BudgetType, ProjectStatus
from .task import Task
from .time_entry import TimeEntry
from .allocation import Allocation
from .rate import ProjectUserRateOverride, ProjectRoleRateOverride, RoleDefaultRate
from .invitation import Invitation
from .auth_models import VerificationToken

__all__ = [
    "Organization", "WeekStart",
    "User", "UserRole",
    "Client",
    "Project", "BudgetType", "ProjectStatus",
    "Task",
    "TimeEntry",
    "Allocation",
    "ProjectUserRateOverride", "ProjectRoleRateOverride", "RoleDefaultRate",
    "Invitation",
    "VerificationToken",
]
