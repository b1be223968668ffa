"""
Redux/Vuex-style Configuration Store for the Vibe Kanban client.

This module implements a unidirectional data flow pattern:
    Action -> Dispatch -> Reducer -> New State -> Notify Subscribers

The store owns the session's single configuration record. It is loaded once
from the persistence service and then changed only through ``update``, which
merges a partial record locally (optimistic) without contacting the service.

Usage:
    store = ConfigStore(service)
    store.subscribe(my_callback)

    await store.load()
    store.update({"theme": "dark"})

    def my_callback(old_state: ConfigState, new_state: ConfigState):
        if Selectors.record(old_state) != Selectors.record(new_state):
            self._refresh(new_state)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from vibe_kanban_app.core.constants import ShellPhase, ThemeMode
from vibe_kanban_app.core.exceptions import ConfigLoadError, ConfigStoreError, ErrorCodes

if TYPE_CHECKING:
    from vibe_kanban_app.core.dataclasses_config import ConfigurationRecord
    from vibe_kanban_app.services.protocols import ConfigPersistenceProtocol

logger = logging.getLogger(__name__)


# =============================================================================
# State
# =============================================================================


@dataclass(frozen=True)
class ConfigState:
    """
    Immutable store state.

    - record: the in-memory configuration record (None until loaded)
    - version: highest version known to be stored remotely
    - loading / loaded / load_error: startup fetch lifecycle
    """

    record: ConfigurationRecord | None = None
    version: int = 0
    loading: bool = False
    loaded: bool = False
    load_error: str | None = None


# =============================================================================
# Actions
# =============================================================================


class ActionType(StrEnum):
    """All possible action types."""

    LOAD_STARTED = auto()
    LOAD_SUCCEEDED = auto()
    LOAD_FAILED = auto()
    CONFIG_UPDATED = auto()
    VERSION_ACKNOWLEDGED = auto()


@dataclass(frozen=True)
class Action:
    """
    Represents an action that can change state.

    Actions are immutable and describe what happened, not how to update state.
    """

    type: ActionType
    payload: dict[str, Any] | None = None


class Actions:
    """Action creators."""

    @staticmethod
    def load_started() -> Action:
        return Action(type=ActionType.LOAD_STARTED)

    @staticmethod
    def load_succeeded(record: ConfigurationRecord, version: int) -> Action:
        """Create action for a record fetched from the persistence service."""
        return Action(type=ActionType.LOAD_SUCCEEDED, payload={"record": record, "version": version})

    @staticmethod
    def load_failed(error: str) -> Action:
        return Action(type=ActionType.LOAD_FAILED, payload={"error": error})

    @staticmethod
    def config_updated(partial: Mapping[str, Any]) -> Action:
        """Create action merging a partial record into the in-memory record."""
        return Action(type=ActionType.CONFIG_UPDATED, payload={"partial": dict(partial)})

    @staticmethod
    def version_acknowledged(version: int) -> Action:
        """Create action for a save the service acknowledged at ``version``."""
        return Action(type=ActionType.VERSION_ACKNOWLEDGED, payload={"version": version})


# =============================================================================
# Reducer
# =============================================================================


def config_reducer(state: ConfigState, action: Action) -> ConfigState:
    """
    Pure function that takes current state and action, returns new state.

    This is the ONLY place where state changes are defined.
    """
    payload = action.payload or {}

    match action.type:
        case ActionType.LOAD_STARTED:
            return replace(state, loading=True, load_error=None)

        case ActionType.LOAD_SUCCEEDED:
            return replace(
                state,
                record=payload["record"],
                version=payload.get("version", 0),
                loading=False,
                loaded=True,
                load_error=None,
            )

        case ActionType.LOAD_FAILED:
            return replace(state, loading=False, loaded=False, load_error=payload.get("error", "unknown error"))

        case ActionType.CONFIG_UPDATED:
            if state.record is None:
                msg = "Cannot update configuration before it is loaded"
                raise ConfigStoreError(msg, ErrorCodes.CONFIG_NOT_LOADED)
            return replace(state, record=state.record.merged(payload.get("partial", {})))

        case ActionType.VERSION_ACKNOWLEDGED:
            # Acknowledgements can arrive out of order; keep the highest
            return replace(state, version=max(state.version, payload.get("version", 0)))

        case _:
            logger.warning("Unknown action type: %s", action.type)
            return state


# =============================================================================
# Selectors
# =============================================================================


class Selectors:
    """Read helpers over ``ConfigState``."""

    @staticmethod
    def record(state: ConfigState) -> ConfigurationRecord | None:
        return state.record

    @staticmethod
    def is_loading(state: ConfigState) -> bool:
        return state.loading

    @staticmethod
    def is_loaded(state: ConfigState) -> bool:
        return state.loaded and state.record is not None

    @staticmethod
    def load_failed(state: ConfigState) -> bool:
        return state.load_error is not None

    @staticmethod
    def theme(state: ConfigState) -> ThemeMode:
        """Initial theme for the shell's theme provider (system until loaded)."""
        if state.record is None:
            return ThemeMode.SYSTEM
        return state.record.theme

    @staticmethod
    def base_phase(state: ConfigState) -> ShellPhase | None:
        """Loading/failed phase, or None once a record is available for gating."""
        if state.load_error is not None:
            return ShellPhase.LOAD_FAILED
        if state.loading or not Selectors.is_loaded(state):
            return ShellPhase.LOADING
        return None


# =============================================================================
# Store
# =============================================================================

# Type for subscriber callbacks
StateChangeCallback = Callable[[ConfigState, ConfigState], None]
UnsubscribeFunction = Callable[[], None]


class ConfigStore:
    """
    Central store for the session's configuration record.

    The store:
    - Holds the single source of truth for the configuration record
    - Dispatches actions through the reducer
    - Notifies subscribers when state changes
    - Supports middleware for logging and side effects
    """

    def __init__(self, service: ConfigPersistenceProtocol, initial_state: ConfigState | None = None) -> None:
        """
        Initialize the store.

        Args:
            service: Persistence service the record is loaded from
            initial_state: Optional initial state, defaults to ConfigState()

        """
        self._service = service
        self._state = initial_state or ConfigState()
        self._subscribers: list[StateChangeCallback] = []
        self._middleware: list[Callable[[Action], Action | None]] = []
        self._is_dispatching = False
        self._queued: list[Action] = []
        self._load_task: asyncio.Task[ConfigurationRecord | None] | None = None

        logger.info("ConfigStore initialized with state: %s", self._state)

    @property
    def state(self) -> ConfigState:
        """Get current state (read-only)."""
        return self._state

    @property
    def is_dispatching(self) -> bool:
        """Check if a dispatch is currently in progress."""
        return self._is_dispatching

    # === Configuration record operations ===

    async def load(self) -> ConfigurationRecord | None:
        """
        Fetch the record from the persistence service.

        Only the first call fetches; later calls share the in-flight fetch or
        return the loaded record. After a failure another call retries.

        Returns:
            The loaded record, or None if loading failed (see ``state.load_error``).

        """
        if Selectors.is_loaded(self._state):
            logger.debug("Config already loaded, skipping fetch")
            return self._state.record
        if self._load_task is None or self._load_task.done():
            self._load_task = asyncio.create_task(self._fetch())
        return await asyncio.shield(self._load_task)

    async def _fetch(self) -> ConfigurationRecord | None:
        self.dispatch(Actions.load_started())
        try:
            versioned = await self._service.load_config()
        except ConfigLoadError as e:
            logger.error("Error loading config: %s", e)
            self.dispatch(Actions.load_failed(str(e)))
            return None
        except Exception as e:
            logger.exception("Unexpected error loading config: %s", e)
            self.dispatch(Actions.load_failed(f"Unexpected error: {e}"))
            return None

        self.dispatch(Actions.load_succeeded(versioned.record, versioned.version))
        return self._state.record

    def get(self) -> ConfigurationRecord | None:
        """Return the current in-memory record without blocking."""
        return self._state.record

    def update(self, partial: Mapping[str, Any]) -> None:
        """
        Merge ``partial`` into the in-memory record (shallow, field by field).

        Does not contact the persistence service. Called from inside a
        subscriber callback, the update is applied right after the current
        dispatch finishes.

        Raises:
            ConfigStoreError: If no record has been loaded yet.
            ConfigValidationError: If ``partial`` names an unknown field or holds a bad value.

        """
        if self._state.record is None:
            msg = "Cannot update configuration before it is loaded"
            raise ConfigStoreError(msg, ErrorCodes.CONFIG_NOT_LOADED)
        self._state.record.merged(partial)
        self.dispatch_safe(Actions.config_updated(partial))

    # === Dispatch ===

    def dispatch(self, action: Action) -> None:
        """Dispatch an action to change state."""
        if self._is_dispatching:
            msg = f"Cannot dispatch {action.type} while a dispatch is in progress."
            raise RuntimeError(msg)

        try:
            self._is_dispatching = True
            self._dispatch_now(action)
        finally:
            self._is_dispatching = False

        self._flush_queued()

    def dispatch_safe(self, action: Action) -> None:
        """
        Dispatch sync if safe, queue if in dispatch.
        Queued actions run as soon as the current dispatch completes.
        """
        if self._is_dispatching:
            logger.debug("DISPATCH_SAFE: Queueing %s (in dispatch)", action.type)
            self._queued.append(action)
        else:
            self.dispatch(action)

    def _dispatch_now(self, action: Action) -> None:
        logger.info("ACTION DISPATCHED: %s | Payload: %s", action.type, action.payload)

        processed_action: Action | None = action
        for middleware in self._middleware:
            if processed_action is None:
                return
            processed_action = middleware(processed_action)

        if processed_action is None:
            return

        old_state = self._state
        new_state = config_reducer(old_state, processed_action)

        # Only notify if state actually changed
        if old_state != new_state:
            diff = self._get_state_diff(old_state, new_state)
            self._state = new_state
            logger.info("STATE CHANGED: %s | Diff: %s", processed_action.type, diff)
            self._notify_subscribers(old_state, new_state)
        else:
            logger.debug("STATE UNCHANGED: %s", processed_action.type)

    def _flush_queued(self) -> None:
        while self._queued and not self._is_dispatching:
            self.dispatch(self._queued.pop(0))

    # === Subscriptions ===

    def subscribe(self, callback: StateChangeCallback) -> UnsubscribeFunction:
        """Subscribe to state changes."""
        self._subscribers.append(callback)
        cb_name = getattr(callback, "__qualname__", str(callback))
        logger.info("SUBSCRIBER ADDED: %s | Total subscribers: %d", cb_name, len(self._subscribers))

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
                logger.info("SUBSCRIBER REMOVED: %s", cb_name)

        return unsubscribe

    def add_middleware(self, middleware: Callable[[Action], Action | None]) -> None:
        """
        Add middleware to process actions before they reach the reducer.

        Middleware can log, modify or cancel (return None) actions.
        """
        self._middleware.append(middleware)

    def _notify_subscribers(self, old_state: ConfigState, new_state: ConfigState) -> None:
        """Notify all subscribers of state change."""
        for callback in self._subscribers[:]:  # Copy list to allow unsubscribe during iteration
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.exception("Error in subscriber callback: %s", e)

    def _get_state_diff(self, old_state: ConfigState, new_state: ConfigState) -> dict[str, tuple[Any, Any]]:
        """Get dictionary of changed fields for logging."""
        diff = {}
        for field in ConfigState.__dataclass_fields__:
            old_val = getattr(old_state, field)
            new_val = getattr(new_state, field)
            if old_val != new_val:
                diff[field] = (old_val, new_val)
        return diff


# =============================================================================
# Middleware
# =============================================================================


def logging_middleware(action: Action) -> Action:
    """Middleware that logs all actions."""
    logger.info("Action dispatched: %s, payload: %s", action.type, action.payload)
    return action
