"""
草稿会话管理器
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from .form import ProductForm
from .tiers import TierLike

logger = logging.getLogger(__name__)


@dataclass
class DraftSession:
    """An open product form owned by one user"""
    draft_id: str
    user_id: str
    form: ProductForm
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    version: int = 1

    def summary(self) -> Dict[str, Any]:
        draft = self.form.draft
        return {
            "draft_id": self.draft_id,
            "user_id": self.user_id,
            "tier": self.form.tier.value,
            "product_name": draft.product_name,
            "main_category": draft.main_category,
            "completion_percentage": self.form.completion_percentage,
            "is_dirty": self.form.is_dirty,
            "last_updated": self.updated_at,
            "version": self.version,
        }


class DraftSessionStore:
    """草稿会话存储 (in memory only)

    Drafts live as long as the session that edits them; a discarded or
    never-submitted draft is simply dropped.
    """
    def __init__(self):
        self._sessions: Dict[str, DraftSession] = {}

    def create(self,
               user_id: str,
               tier: TierLike,
               initial_data: Optional[Mapping[str, Any]] = None,
               record: Optional[Mapping[str, Any]] = None) -> DraftSession:
        """Open a new form, empty/with initial data or populated from a backend record"""
        form = ProductForm(tier=tier, initial_data=initial_data)
        if record is not None:
            form.populate(record)

        session = DraftSession(draft_id=str(uuid.uuid4()), user_id=user_id, form=form)
        self._sessions[session.draft_id] = session
        logger.info(f"Opened draft {session.draft_id} for user {user_id} ({form.tier.value})")
        return session

    def get(self, draft_id: str) -> Optional[DraftSession]:
        return self._sessions.get(draft_id)

    def touch(self, draft_id: str) -> bool:
        """Record that the draft changed"""
        session = self._sessions.get(draft_id)
        if session is None:
            return False
        session.updated_at = datetime.now().isoformat()
        session.version += 1
        return True

    def discard(self, draft_id: str) -> bool:
        if draft_id in self._sessions:
            del self._sessions[draft_id]
            logger.info(f"Discarded draft {draft_id}")
            return True
        return False

    def list_sessions(self, user_id: Optional[str] = None) -> List[DraftSession]:
        sessions = list(self._sessions.values())
        if user_id:
            sessions = [s for s in sessions if s.user_id == user_id]
        return sessions
