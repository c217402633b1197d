from .auth_service import auth_service
from .project_service import project_service
from .evaluation_service import evaluation_service
from .invitation_service import invitation_service
