# services package
"""Services for match aggregation (skill parsing, portal API, console logging)."""

from match_insights.services.portal_client import PortalClient, PortalAPIError, PortalAuthError
from match_insights.services.skill_parser import parse_skill, strip_annotation, skill_matches

__all__ = [
    "PortalClient",
    "PortalAPIError",
    "PortalAuthError",
    "parse_skill",
    "strip_annotation",
    "skill_matches",
]
