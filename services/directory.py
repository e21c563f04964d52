from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Set, Tuple

from config.settings import Settings, get_settings
from db import schema
from db.kv_store import SqliteKeyValueStore
from db.repos.actions_repo import ActionsRepo
from db.repos.profiles_repo import ProfilesRepo
from db.repos.sessions_repo import SessionsRepo
from models import ActionType, Profile, ProfileFilter, Session
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import CheckLinkedinUnique, EnrichProfile, PersistProfile, ValidateProfile
from ports.llm import TextGenerationPort
from ports.repos import ActionLogPort, ProfileStorePort, SessionsRepoPort
from services.ai_enrichment import AIEnrichment
from services.errors import NotFoundError, PermissionDeniedError, ValidationError
from services.llm_client import LLMClient


logger = logging.getLogger(__name__)

ACTION_TYPES = ("open_linkedin", "assumed_follow")


class Directory:
    """Consumer-facing operations over profiles, actions and AI enrichment.

    Every operation takes the caller's Session. The session e-mail is trusted as
    given; it only decides which profile is "mine".
    """

    def __init__(
        self,
        profiles: ProfileStorePort,
        actions: ActionLogPort,
        sessions: SessionsRepoPort,
        ai: AIEnrichment,
    ) -> None:
        self.profiles = profiles
        self.actions = actions
        self.sessions = sessions
        self.ai = ai

    @classmethod
    def from_connection(
        cls,
        conn: sqlite3.Connection,
        *,
        settings: Optional[Settings] = None,
        client: Optional[TextGenerationPort] = None,
    ) -> "Directory":
        settings = settings or get_settings()
        schema.bootstrap(conn)
        store = SqliteKeyValueStore(conn)
        return cls(
            profiles=ProfilesRepo(store, avatar_base_url=settings.avatar_placeholder_url),
            actions=ActionsRepo(store),
            sessions=SessionsRepo(store),
            ai=AIEnrichment.from_settings(client or LLMClient(settings), settings),
        )

    def _require(self, profile_id: str) -> Profile:
        profile = self.profiles.get(profile_id)
        if profile is None:
            raise NotFoundError(f"Profile not found: {profile_id}")
        return profile

    def _require_owner(self, session: Session, profile_id: str) -> None:
        if self.sessions.profile_id_for(session.email) != profile_id:
            raise PermissionDeniedError("Only the owner of a profile can change it.")

    def _registration_pipeline(self) -> Pipeline:
        return Pipeline([
            ValidateProfile(),
            CheckLinkedinUnique(self.profiles),
            EnrichProfile(self.ai),
            PersistProfile(self.profiles),
        ])

    # --- READ ---
    def list_profiles(
        self,
        session: Session,
        search: Optional[str] = None,
        area: Optional[str] = None,
        city: Optional[str] = None,
    ) -> List[Profile]:
        return self.profiles.list(ProfileFilter(search=search, area=area, city=city))

    def filter_options(self, session: Session) -> Dict[str, List[str]]:
        """Distinct areas and cities, sorted, for the filter dropdowns."""
        profiles = self.profiles.list()
        return {
            "areas": sorted({p.area for p in profiles}),
            "cities": sorted({p.city for p in profiles}),
        }

    def my_profile(self, session: Session) -> Optional[Profile]:
        profile_id = self.sessions.profile_id_for(session.email)
        return self.profiles.get(profile_id) if profile_id else None

    # --- WRITE ---
    def create_profile(self, session: Session, data: Dict[str, Any]) -> Profile:
        pipeline = self._registration_pipeline()
        ctx = pipeline.run(RunContext(mode="create", raw=dict(data)))
        self.sessions.bind(session.email, ctx.profile.id)
        logger.info("profile registered", extra={"step": "directory.create", "status": "ok", "session": session.email})
        return ctx.profile  # type: ignore[return-value]

    def update_profile(self, session: Session, profile_id: str, changes: Dict[str, Any]) -> Profile:
        current = self._require(profile_id)
        self._require_owner(session, profile_id)
        pipeline = self._registration_pipeline()
        ctx = pipeline.run(RunContext(mode="update", profile_id=profile_id, current=current, raw=dict(changes)))
        return ctx.profile  # type: ignore[return-value]

    def delete_profile(self, session: Session, profile_id: str) -> None:
        """Missing ids are a silent no-op, unlike update."""
        if self.profiles.get(profile_id) is None:
            return
        self._require_owner(session, profile_id)
        self.profiles.delete(profile_id)
        self.sessions.unbind_profile(profile_id)

    # --- ACTIONS ---
    def track_action(self, session: Session, profile_id: str, action_type: ActionType) -> None:
        if action_type not in ACTION_TYPES:
            raise ValidationError(f"Unknown action type: {action_type}")
        self._require(profile_id)
        self.actions.record(profile_id, action_type)

    def follow_profile(self, session: Session, profile_id: str) -> str:
        """Record an assumed follow and return the LinkedIn URL to open."""
        profile = self._require(profile_id)
        self.actions.record(profile_id, "assumed_follow")
        return profile.linkedin_url

    def followed_ids(self, session: Session) -> Set[str]:
        return self.actions.followed_set()

    # --- AI ---
    def icebreaker_parties(self, session: Session, target_id: str) -> Tuple[Profile, Profile]:
        """Sender (the session's own profile) and target; store reads only."""
        sender = self.my_profile(session)
        if sender is None:
            raise NotFoundError("Create your profile before generating a personalized message.")
        return sender, self._require(target_id)

    def generate_icebreaker(self, session: Session, target_id: str) -> str:
        sender, target = self.icebreaker_parties(session, target_id)
        return self.ai.icebreaker(sender, target)
