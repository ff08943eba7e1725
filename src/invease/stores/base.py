"""
Store base class
State holder with a mutation API, observers and write-through persistence
"""

import logging
import re
import threading
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Type,
    TypeVar,
)

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from invease.exceptions import StorageError
from invease.storage import StateStorage

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)
ModelT = TypeVar("ModelT", bound=BaseModel)

# Store listener type
StoreListener = Callable[[Any], None]

CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case_keys(value: Any) -> Any:
    """Recursively rename camelCase dictionary keys to snake_case"""
    if isinstance(value, dict):
        return {
            (CAMEL_BOUNDARY_RE.sub("_", key).lower() if isinstance(key, str) else key):
                snake_case_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [snake_case_keys(item) for item in value]
    return value


def merge_model(model: ModelT, changes: Dict[str, Any]) -> ModelT:
    """Copy of ``model`` with ``changes`` merged in and coerced to field types"""
    return type(model).model_validate({**model.model_dump(), **changes})


def _nested_model(model_cls: Type[BaseModel], name: str) -> Optional[Type[BaseModel]]:
    """Model class of field ``name`` when it is a plain nested model"""
    field = model_cls.model_fields.get(name)
    annotation = field.annotation if field is not None else None
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def restore_model(
    model_cls: Type[ModelT], raw: Any, defaults: ModelT, label: str = ""
) -> ModelT:
    """
    Rebuild a model from persisted data, filling gaps from ``defaults``

    Missing fields take their default, unknown fields are ignored and
    fields that fail validation are replaced by their default. Never
    raises.

    Args:
        model_cls: Model to build
        raw: Persisted dictionary (anything else yields ``defaults``)
        defaults: Model supplying fallback values
        label: Name used in log messages

    Returns:
        Restored model instance
    """
    label = label or model_cls.__name__
    if not isinstance(raw, dict):
        logger.warning(f"Discarding persisted {label}: expected an object")
        return defaults.model_copy(deep=True)

    fallback = defaults.model_dump()
    candidate = dict(fallback)
    candidate.update({k: v for k, v in raw.items() if k in model_cls.model_fields})

    try:
        return model_cls.model_validate(candidate)
    except PydanticValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning(
            f"Replacing invalid persisted {label} fields with defaults: "
            f"{', '.join(sorted(str(name) for name in invalid))}"
        )
        for name in invalid:
            if name not in fallback:
                continue
            nested_cls = _nested_model(model_cls, str(name))
            nested_default = getattr(defaults, str(name), None)
            if (
                nested_cls is not None
                and isinstance(candidate[name], dict)
                and isinstance(nested_default, nested_cls)
            ):
                # repair field by field so valid siblings survive
                candidate[name] = restore_model(
                    nested_cls, candidate[name], nested_default, f"{label}.{name}"
                ).model_dump()
            else:
                candidate[name] = fallback[name]

    try:
        return model_cls.model_validate(candidate)
    except PydanticValidationError:
        logger.warning(f"Discarding persisted {label}: could not be repaired")
        return defaults.model_copy(deep=True)


class BaseStore(Generic[StateT]):
    """
    Base class for the stores

    Subclasses define ``storage_key``, ``version``, ``state_model`` and
    ``default_state()``. Every mutation goes through ``_mutate``, which
    computes the next state under the store lock, commits it, persists
    it and then notifies subscribers.

    Persistence is write-through. A failed write is logged and the
    in-memory state stays authoritative.
    """

    storage_key: str = ""
    version: int = 0
    state_model: Type[StateT]

    def __init__(self, storage: Optional[StateStorage] = None, auto_load: bool = True) -> None:
        self._storage = storage
        self._lock = threading.RLock()
        self._listeners: List[StoreListener] = []
        self._state: StateT = self.default_state()

        if storage is not None and auto_load:
            self.load()

    def default_state(self) -> StateT:
        raise NotImplementedError

    @property
    def state(self) -> StateT:
        """Current state. Treat as read-only; use the mutators to change it."""
        return self._state

    def snapshot(self) -> StateT:
        """Deep copy of the current state"""
        with self._lock:
            return self._state.model_copy(deep=True)

    # ===== Observers =====

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Register a listener called with the new state after each commit

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state: StateT) -> None:
        for listener in list(self._listeners):
            listener(state)

    # ===== Mutation =====

    def _mutate(self, mutation: Callable[[StateT], StateT]) -> StateT:
        with self._lock:
            next_state = mutation(self._state)
            self._state = next_state
            self._persist()
        self._notify(next_state)
        return next_state

    def _update(self, **changes: Any) -> StateT:
        return self._mutate(lambda state: merge_model(state, changes))

    def replace_state(self, state: StateT) -> None:
        """Swap in a whole new state (e.g. after an import)"""
        self._mutate(lambda _: state.model_copy(deep=True))

    # ===== Persistence =====

    def serialize_state(self, state: StateT) -> Dict[str, Any]:
        return state.model_dump(mode="json")

    def to_persisted(self) -> Dict[str, Any]:
        """Versioned envelope written to storage"""
        return {"version": self.version, "state": self.serialize_state(self._state)}

    def migrate(self, state: Dict[str, Any], version: int) -> Dict[str, Any]:
        """Upgrade a persisted state written by an older version"""
        return state

    def from_persisted(self, raw: Any) -> StateT:
        """
        Build a state from a persisted envelope

        A missing ``version`` means version 0; a record without a
        ``state`` wrapper is taken as the state itself.
        """
        if not isinstance(raw, dict):
            logger.warning(f"Discarding persisted '{self.storage_key}': expected an object")
            return self.default_state()

        version = raw.get("version", 0)
        if not isinstance(version, int):
            version = 0
        state = raw.get("state", raw)
        if isinstance(state, dict):
            # records written by the earlier app use camelCase keys
            state = self.migrate(snake_case_keys(state), version)
        return restore_model(self.state_model, state, self.default_state(), self.storage_key)

    def load(self) -> None:
        """Load persisted state, keeping defaults when nothing is stored"""
        if self._storage is None:
            return
        try:
            raw = self._storage.load(self.storage_key)
        except StorageError as e:
            logger.warning(f"Could not load '{self.storage_key}', using defaults: {e}")
            raw = None

        with self._lock:
            self._state = self.default_state() if raw is None else self.from_persisted(raw)
        self._notify(self._state)

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(self.storage_key, self.to_persisted())
        except StorageError as e:
            logger.error(f"Failed to persist '{self.storage_key}': {e}")
