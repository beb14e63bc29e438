# bucketlist_advisor/session_machine.py
"""
Session State Machine
---------------------

    api-key <-> onboarding -> (category-selection)? -> loading <-> suggestions
                                                          |            |
                                                          +-> error <--+

reset() goes back to onboarding from anywhere, without a network call.

The machine is the only writer of its SessionContext. Every transition
returns that context. Requests capture `ctx.token` before going out and
their responses are dropped if the token changed meanwhile (reset or a
new queue key).
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set

from .config import CATEGORIES, MODES, DEFAULT_MODE, USE_CATEGORIES
from .credential_gate import CredentialGate
from .errors import ApiError, UnauthorizedError, ProfileValidationError, SessionBusyError
from .feedback import FeedbackSubmitter, RefreshChannel
from .history import HistoryView
from .models import Profile, QueueKey, Suggestion, Verdict
from .suggestion_queue import SuggestionQueue, READY
from .validator import require_valid_profile

logger = logging.getLogger(__name__)

NO_MORE_SUGGESTIONS = "No more suggestions available for this selection"


class SessionState(str, Enum):
    API_KEY = "api-key"
    ONBOARDING = "onboarding"
    CATEGORY_SELECTION = "category-selection"
    LOADING = "loading"
    SUGGESTIONS = "suggestions"
    ERROR = "error"


def _new_token() -> str:
    return uuid.uuid4().hex


@dataclass
class SessionContext:
    state: SessionState = SessionState.ONBOARDING
    profile: Optional[Profile] = None
    category: Optional[str] = None
    mode: Optional[str] = None
    current: Optional[Suggestion] = None
    message: str = ""
    loading_message: str = ""
    exhausted: bool = False
    resume_state: Optional[SessionState] = None
    resolved_ids: Set[str] = field(default_factory=set)
    busy: bool = False
    token: str = field(default_factory=_new_token)

    @property
    def queue_key(self) -> Optional[QueueKey]:
        if self.profile is None:
            return None
        return QueueKey(self.profile.profile_id, self.category, self.mode)


class SessionMachine:
    def __init__(
        self,
        api,
        *,
        gate: Optional[CredentialGate] = None,
        queue: Optional[SuggestionQueue] = None,
        channel: Optional[RefreshChannel] = None,
        history: Optional[HistoryView] = None,
        use_categories: bool = USE_CATEGORIES,
    ):
        self.api = api
        self.channel = channel or RefreshChannel()
        self.gate = gate or CredentialGate(api)
        self.queue = queue or SuggestionQueue(api)
        self.submitter = FeedbackSubmitter(api, self.channel)
        self.history = history or HistoryView(api, self.channel)
        self.use_categories = use_categories

        self.ctx = SessionContext()
        self._lock = threading.Lock()

    # =========================================================
    # helpers
    # =========================================================
    @property
    def state(self) -> SessionState:
        return self.ctx.state

    @property
    def budget(self):
        return self.history.budget

    def _set_state(self, state: SessionState) -> None:
        if state != self.ctx.state:
            logger.info("Session %s -> %s", self.ctx.state.value, state.value)
        self.ctx.state = state

    def _is_current(self, token: str) -> bool:
        return token == self.ctx.token

    def _claim(self) -> SessionContext:
        """Single-flight: one mutating request per session at a time."""
        with self._lock:
            if self.ctx.busy:
                raise SessionBusyError()
            self.ctx.busy = True
            return self.ctx

    def _fail(self, message: str, *, exhausted: bool = False) -> None:
        self.ctx.current = None
        self.ctx.message = message
        self.ctx.exhausted = exhausted
        self._set_state(SessionState.ERROR)

    def _gate_closed(self, err: UnauthorizedError, resume: SessionState) -> bool:
        """
        Re-check the key after a 401. Closed -> park in api-key state and
        return True. Still open -> False and the caller handles `err` as a
        normal failure.
        """
        self.gate.invalidate()
        if self.gate.is_open():
            logger.warning("Got 401 but API key status is valid")
            return False

        self.ctx.resume_state = resume
        self.ctx.message = err.message
        self._set_state(SessionState.API_KEY)
        return True

    # =========================================================
    # CREDENTIAL GATE
    # =========================================================
    def start(self) -> SessionContext:
        if not self.gate.is_open():
            if self.ctx.state != SessionState.API_KEY:
                self.ctx.resume_state = self.ctx.state
            self.ctx.message = self.gate.last_error or ""
            self._set_state(SessionState.API_KEY)
        return self.ctx

    def submit_api_key(self, key: str) -> SessionContext:
        if not self.gate.submit(key):
            self.ctx.message = self.gate.last_error or "Invalid API key"
            self._set_state(SessionState.API_KEY)
            return self.ctx

        resume = self.ctx.resume_state or SessionState.ONBOARDING
        self.ctx.resume_state = None
        self.ctx.message = ""

        if resume == SessionState.LOADING and self.ctx.queue_key is not None:
            # the interrupted load is retried with the fresh key
            return self._begin_review(self.ctx.category, self.ctx.mode)

        self._set_state(resume)
        return self.ctx

    def clear_api_key(self) -> SessionContext:
        try:
            self.gate.clear()
        except ApiError as e:
            self.ctx.message = e.message
            return self.ctx

        if self.ctx.state not in (SessionState.API_KEY, SessionState.LOADING):
            self.ctx.resume_state = self.ctx.state
        self._set_state(SessionState.API_KEY)
        return self.ctx

    # =========================================================
    # PROFILE
    # =========================================================
    def submit_profile(self, gender, age, capital, mode=None) -> SessionContext:
        if self.ctx.state not in (SessionState.ONBOARDING, SessionState.API_KEY):
            self.ctx.message = "Reset the session before creating a new profile"
            return self.ctx

        if not self.gate.is_open():
            self.ctx.resume_state = SessionState.ONBOARDING
            self._set_state(SessionState.API_KEY)
            return self.ctx

        try:
            values = require_valid_profile(gender, age, capital, mode)
        except ProfileValidationError as e:
            self.ctx.message = str(e)
            self._set_state(SessionState.ONBOARDING)
            return self.ctx

        try:
            ctx = self._claim()
        except SessionBusyError as e:
            self.ctx.message = str(e)
            return self.ctx

        token = ctx.token
        ctx.message = ""
        ctx.loading_message = "Creating your profile..."
        self._set_state(SessionState.LOADING)

        try:
            data = self.api.create_profile(
                values["gender"], values["age"], values["capital"], values["mode"]
            )
        except UnauthorizedError as e:
            if self._is_current(token) and not self._gate_closed(e, SessionState.ONBOARDING):
                self._fail(e.message)
            return self.ctx
        except ApiError as e:
            if self._is_current(token):
                self._fail(e.message)
            return self.ctx
        finally:
            ctx.busy = False

        if not self._is_current(token):
            logger.debug("Dropping profile response for a reset session")
            return self.ctx

        profile = Profile.from_response(
            data, values["gender"], values["age"], values["capital"], values["mode"]
        )
        ctx.profile = profile
        self.history.bind(profile)
        logger.info("Profile %s created", profile.profile_id)

        if self.use_categories:
            self._set_state(SessionState.CATEGORY_SELECTION)
            return self.ctx

        # no category axis: review starts straight away on the mode-only queue
        return self._begin_review(None, profile.mode or DEFAULT_MODE)

    # =========================================================
    # QUEUE KEY
    # =========================================================
    def select_category(self, category: Optional[str], mode: str) -> SessionContext:
        if self.ctx.profile is None:
            self.ctx.message = "Create a profile first"
            return self.ctx

        if self.use_categories and category not in CATEGORIES:
            self.ctx.message = f"Unknown category '{category}'"
            return self.ctx

        if mode not in MODES:
            self.ctx.message = f"Unknown mode '{mode}'"
            return self.ctx

        return self._begin_review(category if self.use_categories else None, mode)

    def change_selection(self) -> SessionContext:
        """
        Pick a different category/mode, keeping the profile. A request still
        in flight keeps its claim until it returns; its response is dropped.
        """
        if self.ctx.profile is None or not self.use_categories:
            return self.reset()

        self.ctx.token = _new_token()
        self.ctx.current = None
        self.ctx.message = ""
        self.ctx.exhausted = False
        self._set_state(SessionState.CATEGORY_SELECTION)
        return self.ctx

    def _begin_review(self, category: Optional[str], mode: str) -> SessionContext:
        try:
            ctx = self._claim()
        except SessionBusyError as e:
            self.ctx.message = str(e)
            return self.ctx

        try:
            ctx.token = _new_token()
            ctx.category = category
            ctx.mode = mode
            ctx.current = None
            ctx.message = ""
            ctx.exhausted = False
            self._set_state(SessionState.LOADING)

            self._load_next(ctx.token)
        finally:
            ctx.busy = False
        return self.ctx

    def _load_next(self, token: str) -> None:
        ctx = self.ctx
        key = ctx.queue_key
        ctx.loading_message = "Loading your next suggestion..."

        def on_generating():
            if self._is_current(token):
                ctx.current = None
                ctx.loading_message = "Generating new suggestions..."
                self._set_state(SessionState.LOADING)

        try:
            # verdicts from this session plus whatever the server already lists as resolved
            exclude = ctx.resolved_ids | self.history.resolved_ids()
            result = self.queue.next(key, exclude=exclude, on_generating=on_generating)
        except UnauthorizedError as e:
            if self._is_current(token) and not self._gate_closed(e, SessionState.LOADING):
                self._fail(e.message)
            return
        except ApiError as e:
            if self._is_current(token):
                self._fail(e.message)
            return

        if not self._is_current(token):
            logger.debug("Dropping suggestion for stale queue key %s", key)
            return

        if result["status"] == READY:
            ctx.current = result["suggestion"]
            ctx.message = ""
            self._set_state(SessionState.SUGGESTIONS)
        else:
            self._fail(NO_MORE_SUGGESTIONS, exhausted=True)

    # =========================================================
    # VERDICTS
    # =========================================================
    def accept(self) -> SessionContext:
        return self._verdict(Verdict.ACCEPT)

    def reject(self, reason: Optional[str] = None, is_custom_reason: Optional[bool] = None) -> SessionContext:
        current = self.ctx.current
        if is_custom_reason is None and reason and current is not None:
            is_custom_reason = reason not in current.reason_menu()
        return self._verdict(Verdict.REJECT, reason, bool(is_custom_reason))

    def _verdict(self, verdict: Verdict, reason=None, is_custom_reason=False) -> SessionContext:
        current = self.ctx.current
        if self.ctx.state != SessionState.SUGGESTIONS or current is None:
            self.ctx.message = "There is no suggestion to review"
            return self.ctx

        if current.id in self.ctx.resolved_ids:
            self.ctx.message = "This suggestion has already been reviewed"
            return self.ctx

        try:
            ctx = self._claim()
        except SessionBusyError as e:
            self.ctx.message = str(e)
            return self.ctx

        token = ctx.token
        try:
            try:
                self.submitter.submit(
                    ctx.profile.profile_id, current.id, verdict, reason, is_custom_reason
                )
            except UnauthorizedError as e:
                if self._is_current(token) and not self._gate_closed(e, SessionState.SUGGESTIONS):
                    ctx.message = e.message
                return self.ctx
            except ApiError as e:
                # recoverable: keep the same suggestion so the verdict can be retried
                if self._is_current(token):
                    ctx.message = e.message
                return self.ctx

            if not self._is_current(token):
                logger.debug("Dropping verdict follow-up for a reset session")
                return self.ctx

            ctx.resolved_ids.add(current.id)
            ctx.current = None
            ctx.message = ""
            self._set_state(SessionState.LOADING)

            self._load_next(token)
        finally:
            ctx.busy = False
        return self.ctx

    # =========================================================
    # RESET
    # =========================================================
    def reset(self) -> SessionContext:
        """Always succeeds, no network. In-flight responses become stale."""
        logger.info("Session reset")
        self.ctx = SessionContext()
        self.history.bind(None)
        return self.ctx
