from .directory import AdminDirectoryClient
from .team import AdminTeamService
from .workflows import CreateAdminWorkflow, CreateState, EditAdminWorkflow, EditState

__all__ = [
    "AdminDirectoryClient",
    "AdminTeamService",
    "CreateAdminWorkflow",
    "CreateState",
    "EditAdminWorkflow",
    "EditState",
]
