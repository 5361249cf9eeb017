"""Pydantic schemas for API requests/responses."""

from .common import *  # noqa: F401,F403
from .users import *  # noqa: F401,F403
from .workplaces import *  # noqa: F401,F403
from .auth import *  # noqa: F401,F403
from .roles import *  # noqa: F401,F403
from .groups import *  # noqa: F401,F403
from .tasks import *  # noqa: F401,F403
from .custom_fields import *  # noqa: F401,F403
from .activity import *  # noqa: F401,F403
from .lounge import *  # noqa: F401,F403
from .files import *  # noqa: F401,F403
from .workload import *  # noqa: F401,F403
from .notifications import *  # noqa: F401,F403
