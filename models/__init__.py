from .profile import Profile, ProfileBrief, ProfileCreate, ProfileUpdate, ProfileFilter
from .profile_action import ProfileAction, ActionType
from .enrichment_result import EnrichmentResult, ENRICHMENT_RESPONSE_SCHEMA
from .session import Session

__all__ = [
    "Profile",
    "ProfileBrief",
    "ProfileCreate",
    "ProfileUpdate",
    "ProfileFilter",
    "ProfileAction",
    "ActionType",
    "EnrichmentResult",
    "ENRICHMENT_RESPONSE_SCHEMA",
    "Session",
]
