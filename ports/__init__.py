from .llm import TextGenerationPort
from .repos import ActionLogPort, KeyValueStorePort, ProfileStorePort, SessionsRepoPort

__all__ = [
    "TextGenerationPort",
    "ActionLogPort",
    "KeyValueStorePort",
    "ProfileStorePort",
    "SessionsRepoPort",
]
