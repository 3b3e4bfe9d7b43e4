# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - labs.py: Lab CRUD, owner listing and linked teams
# - teams.py: Team CRUD, owner listing and linked labs
# - lab_requests.py: Rental requests and their admin review
# - collaborations.py: Collaboration enquiries
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import labs
from . import teams
from . import lab_requests
from . import collaborations

__all__ = [
    "health",
    "labs",
    "teams",
    "lab_requests",
    "collaborations",
]
