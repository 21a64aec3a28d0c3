"""
Persistence collaborators: where suggestions and profiles live between requests.

The protocols are what the router depends on; the in-memory classes back a
single application instance (and the tests). A database-backed store only
needs to provide the same methods.
"""
import copy
import logging
from typing import Any, Dict, List, Optional, Protocol

from resume_studio.models.suggestions import InlineSuggestion

logger = logging.getLogger(__name__)


class ProfileNotFoundError(RuntimeError):
    pass


class PersistenceError(RuntimeError):
    pass


class SuggestionStore(Protocol):
    def save(self, resume_id: str, suggestions: List[InlineSuggestion]) -> int: ...

    def list(self, resume_id: str) -> List[InlineSuggestion]: ...

    def get(self, suggestion_id: str) -> Optional[InlineSuggestion]: ...

    def owner_of(self, suggestion_id: str) -> Optional[str]: ...

    def update(self, suggestion: InlineSuggestion) -> bool: ...

    def delete(self, suggestion_id: str) -> bool: ...

    def clear(self, resume_id: str) -> None: ...


class ProfileStore(Protocol):
    def load(self, resume_id: str) -> Dict[str, Any]: ...

    def save(self, resume_id: str, profile: Dict[str, Any]) -> None: ...


class InMemorySuggestionStore:
    """Suggestions per resume, newest first."""

    def __init__(self) -> None:
        self._by_resume: Dict[str, List[str]] = {}
        self._suggestions: Dict[str, InlineSuggestion] = {}
        self._owner: Dict[str, str] = {}

    def save(self, resume_id: str, suggestions: List[InlineSuggestion]) -> int:
        """Replace every stored suggestion for the resume."""
        self.clear(resume_id)
        ids = []
        for suggestion in suggestions:
            if suggestion.id in self._owner:
                self.delete(suggestion.id)
            self._suggestions[suggestion.id] = suggestion
            self._owner[suggestion.id] = resume_id
            if suggestion.id not in ids:
                ids.append(suggestion.id)
        self._by_resume[resume_id] = ids
        return len(ids)

    def list(self, resume_id: str) -> List[InlineSuggestion]:
        stored = [self._suggestions[i] for i in self._by_resume.get(resume_id, [])]
        return sorted(stored, key=lambda s: s.created_at, reverse=True)

    def get(self, suggestion_id: str) -> Optional[InlineSuggestion]:
        return self._suggestions.get(suggestion_id)

    def owner_of(self, suggestion_id: str) -> Optional[str]:
        return self._owner.get(suggestion_id)

    def update(self, suggestion: InlineSuggestion) -> bool:
        if suggestion.id not in self._suggestions:
            return False
        self._suggestions[suggestion.id] = suggestion
        return True

    def delete(self, suggestion_id: str) -> bool:
        if suggestion_id not in self._suggestions:
            return False
        resume_id = self._owner.pop(suggestion_id)
        del self._suggestions[suggestion_id]
        self._by_resume[resume_id] = [i for i in self._by_resume.get(resume_id, []) if i != suggestion_id]
        return True

    def clear(self, resume_id: str) -> None:
        for suggestion_id in self._by_resume.pop(resume_id, []):
            self._suggestions.pop(suggestion_id, None)
            self._owner.pop(suggestion_id, None)


class InMemoryProfileStore:
    """Profiles keyed by resume id. Values are copied in and out."""

    def __init__(self) -> None:
        self._profiles: Dict[str, Dict[str, Any]] = {}

    def load(self, resume_id: str) -> Dict[str, Any]:
        if resume_id not in self._profiles:
            raise ProfileNotFoundError(f"No profile stored for resume {resume_id}")
        return copy.deepcopy(self._profiles[resume_id])

    def save(self, resume_id: str, profile: Dict[str, Any]) -> None:
        if not isinstance(profile, dict):
            raise PersistenceError("Profile must be a JSON object")
        self._profiles[resume_id] = copy.deepcopy(profile)
        logger.debug("Saved profile for resume %s", resume_id)
