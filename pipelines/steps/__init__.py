# Namespace for pipeline steps
from .validate_profile import ValidateProfile  # noqa: F401
from .check_unique import CheckLinkedinUnique  # noqa: F401
from .enrich_profile import EnrichProfile  # noqa: F401
from .persist_profile import PersistProfile  # noqa: F401
