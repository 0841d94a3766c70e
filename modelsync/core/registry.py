"""Registry — the ordered set of handler bindings and publish settings.

The registry is populated once at startup through ``register_subscribe`` and
``register_publish`` and frozen before message receipt begins.  After
``freeze()`` it is read-only, so concurrent workers may look bindings up
without locking.

Registration resolves every implementation target up front: direct handlers
are looked up on their target object, allow-lists are checked against the
entity type's fields.  A bad registration fails here, at startup, rather than
on the first message that happens to match it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from modelsync.core.matcher import select
from modelsync.errors import RegistrationError, RegistryFrozenError
from modelsync.models.bindings import BindingMode, HandlerBinding, PublishSettings
from modelsync.models.entities import EntityType
from modelsync.models.envelopes import DEFAULT_ACTIONS, SyncAction, normalize_name

logger = logging.getLogger(__name__)


def target_name(target: Any) -> str:
    """Name a registration target: entity type name, class/function name, or type name."""
    if isinstance(target, EntityType):
        return target.name
    if isinstance(target, str):
        return target
    name = getattr(target, "__name__", None)
    return name if isinstance(name, str) else type(target).__name__


class Registry:
    """Insertion-ordered handler bindings plus per-entity-type publish settings.

    Usage
    -----
    >>> users = EntityType(name="User", field_types={"id": int, "name": str})
    >>> registry = Registry()
    >>> _ = registry.register_subscribe(users, attrs=["name"])
    >>> [b.target_action for b in registry.lookup("User", "update")]
    ['update']
    """

    def __init__(self) -> None:
        self._bindings: list[HandlerBinding] = []
        self._publishers: dict[str, PublishSettings] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def freeze(self) -> None:
        """End the registration phase."""
        if not self._frozen:
            self._frozen = True
            logger.info(
                "Registry frozen: %d bindings, %d publishers",
                len(self._bindings),
                len(self._publishers),
            )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_open(self) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                "Registry is frozen; register all bindings before starting receipt"
            )

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def register(self, binding: HandlerBinding) -> HandlerBinding:
        """Append *binding*.  Duplicates are kept; every match runs."""
        self._check_open()
        self._bindings.append(binding)
        logger.debug("Registered binding: %s", binding.describe())
        return binding

    def lookup(self, class_name: Any, action: Any) -> list[HandlerBinding]:
        """Return all bindings targeting (*class_name*, *action*), in registration order."""
        return select(self._bindings, class_name, action)

    @property
    def bindings(self) -> tuple[HandlerBinding, ...]:
        return tuple(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[HandlerBinding]:
        return iter(tuple(self._bindings))

    # ------------------------------------------------------------------
    # Registration API
    # ------------------------------------------------------------------

    def register_subscribe(
        self,
        target: Any,
        attrs: Iterable[str] | None = None,
        actions: Iterable[Any] | Any | None = None,
        *,
        as_class: Any = None,
        id_key: str | None = None,
        direct_mode: bool = False,
        as_action: Any = None,
    ) -> list[HandlerBinding]:
        """Subscribe *target* to inbound envelopes.

        ``direct_mode=True``: *target* is any object exposing one callable per
        action; each call receives the envelope payload.  ``actions`` is
        required.

        ``direct_mode=False``: *target* is an ``EntityType`` reconciled from
        the payload.  ``actions`` defaults to create/update/destroy and
        ``attrs`` is the inbound allow-list.

        ``as_class`` and ``as_action`` rename what the envelope must carry;
        ``as_action`` needs a single action.
        """
        action_names = _action_list(actions)
        if direct_mode and not action_names:
            raise RegistrationError(
                f"Direct subscription for {target_name(target)!r} needs at least one action"
            )
        if not action_names:
            action_names = list(DEFAULT_ACTIONS)
        if as_action is not None and len(action_names) != 1:
            raise RegistrationError("as_action needs exactly one action")

        impl_class = target_name(target)
        wire_class = normalize_name(as_class) if as_class is not None else impl_class
        allowed = frozenset(attrs) if attrs is not None else None

        if direct_mode:
            build = self._direct_binding
        else:
            build = self._reconciling_binding

        created = [
            build(
                target,
                impl_class=impl_class,
                wire_class=wire_class,
                action=action,
                wire_action=normalize_name(as_action) if as_action is not None else action,
                allowed=allowed,
                id_key=id_key,
            )
            for action in action_names
        ]
        for binding in created:
            self.register(binding)
        return created

    def _direct_binding(
        self, target: Any, *, impl_class: str, wire_class: str, action: str,
        wire_action: str, allowed: frozenset[str] | None, id_key: str | None,
    ) -> HandlerBinding:
        handler = getattr(target, action, None)
        if not callable(handler):
            raise RegistrationError(f"{impl_class} has no callable {action!r}")
        return HandlerBinding(
            target_class=wire_class,
            target_action=wire_action,
            mode=BindingMode.DIRECT,
            impl_class=impl_class,
            impl_action=action,
            identity_key=id_key,
            allowed_attrs=allowed,
            handler=handler,
        )

    def _reconciling_binding(
        self, target: Any, *, impl_class: str, wire_class: str, action: str,
        wire_action: str, allowed: frozenset[str] | None, id_key: str | None,
    ) -> HandlerBinding:
        if not isinstance(target, EntityType):
            raise RegistrationError(
                f"Reconciling subscription needs an EntityType, got {impl_class!r}"
            )
        if action not in DEFAULT_ACTIONS:
            raise RegistrationError(
                f"Reconciling subscription for {impl_class} cannot handle action {action!r}; "
                "use direct_mode for custom actions"
            )
        destroy = SyncAction.DESTROY.value
        if (action == destroy) != (wire_action == destroy):
            raise RegistrationError(
                f"{impl_class}: cannot rename {action!r} to {wire_action!r}; "
                "a reconciling destroy must stay a destroy on the wire"
            )
        _check_fields(target, allowed, id_key)
        return HandlerBinding(
            target_class=wire_class,
            target_action=wire_action,
            mode=BindingMode.RECONCILING,
            impl_class=impl_class,
            impl_action=action,
            identity_key=id_key,
            allowed_attrs=allowed,
            entity_type=target,
        )

    def register_publish(
        self,
        entity_type: EntityType,
        attrs: Iterable[str] | None = None,
        actions: Iterable[Any] | Any = DEFAULT_ACTIONS,
        *,
        as_class: Any = None,
        id_accessor: str | Callable[[Any], Any] | None = None,
        skip_if: Callable[[Any, str], bool] | None = None,
    ) -> PublishSettings:
        """Declare how *entity_type* publishes its mutations.

        A second registration for the same entity type replaces the first.
        """
        self._check_open()
        if not isinstance(entity_type, EntityType):
            raise RegistrationError(
                f"Publishing needs an EntityType, got {target_name(entity_type)!r}"
            )
        allowed = frozenset(attrs) if attrs is not None else None
        if allowed is not None and not allowed:
            raise RegistrationError(
                f"{entity_type.name}: an empty attribute list would publish empty payloads"
            )
        _check_fields(
            entity_type, allowed, id_accessor if isinstance(id_accessor, str) else None
        )
        settings = PublishSettings(
            attrs=allowed,
            actions=_action_list(actions),
            as_class=as_class,
            id_accessor=id_accessor,
            skip_if=skip_if,
        )
        self._publishers[entity_type.name] = settings
        logger.debug("Registered publisher for %s: %s", entity_type.name, settings)
        return settings

    def publish_settings_for(self, entity_type: EntityType | str) -> PublishSettings | None:
        return self._publishers.get(target_name(entity_type))

    @property
    def publishers(self) -> dict[str, PublishSettings]:
        return dict(self._publishers)


def _action_list(actions: Iterable[Any] | Any | None) -> list[str]:
    if actions is None:
        return []
    if isinstance(actions, (str, bytes)) or not isinstance(actions, Iterable):
        actions = [actions]
    return [normalize_name(action) for action in actions]


def _check_fields(
    entity_type: EntityType, allowed: frozenset[str] | None, id_key: str | None
) -> None:
    if allowed is not None:
        unknown = allowed - entity_type.field_names
        if unknown:
            raise RegistrationError(
                f"{entity_type.name} has no attributes {sorted(unknown)}"
            )
    if id_key is not None and not entity_type.has_field(id_key):
        raise RegistrationError(f"{entity_type.name} has no identity field {id_key!r}")
