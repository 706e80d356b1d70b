"""LayerService — register and resolve per-user layers.

create_layer pipeline: VALIDATE → IDENTIFY → CHECK+PERSIST → EVENT → RESPOND

The caller of a write is always taken from the injected identity source,
never from an argument. Lookups take an explicit user and may target any
namespace.

INVARIANTS:
- A user's layer names are pairwise distinct.
- A name is in a user's list iff ``(user, name)`` has a link.
- A binding never changes once created.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from galaxyctl.domain.layers import (
    LayerCreated,
    LayerErrorCode,
    RegistryIntegrityError,
    validate_layer_name,
)
from galaxyctl.services._helpers import now_iso
from galaxyctl.services.base import BaseService
from galaxyctl.services.result import ServiceResult
from galaxyctl.services.timing import phase, timed

if TYPE_CHECKING:
    from galaxyctl.domain.identity import IdentitySource
    from galaxyctl.infrastructure.registry import Registry

logger = logging.getLogger(__name__)

POST_CREATE_LAYER = "post_create_layer"


def _already_exists(user: str, layer_name: str) -> ServiceResult:
    return ServiceResult.failure(
        "create_layer",
        LayerErrorCode.LAYER_ALREADY_EXISTS,
        f"Layer {layer_name!r} already exists for {user}",
        user=user,
        layer_name=layer_name,
    )


class LayerService(BaseService):
    """Owns the layer registry's two operations plus listing."""

    def __init__(self, registry: Registry, identity: IdentitySource) -> None:
        super().__init__(registry)
        self._identity = identity

    @timed
    def create_layer(self, layer_name: str, ipfs_link: str) -> ServiceResult:
        """Register *layer_name* → *ipfs_link* in the caller's namespace.

        Fails with ``LAYER_ALREADY_EXISTS`` (state untouched) if the caller
        already owns a layer by that exact name.

        Raises:
            ValueError: If *layer_name* is empty.
        """
        validate_layer_name(layer_name)
        user = self._identity.current_user()

        with phase("persist"), self._registry.user_lock(user):
            try:
                with self._registry.transaction() as txn:
                    layers = txn.get_layers(user) or []
                    if layer_name in layers:
                        return _already_exists(user, layer_name)
                    now = now_iso()
                    txn.put_layers(user, [*layers, layer_name], now)
                    txn.insert_link(user, layer_name, ipfs_link, now)
            except IntegrityError:
                # Another process bound the same name between our read and write.
                logger.debug("Link insert conflict for %s/%s", user, layer_name)
                return _already_exists(user, layer_name)

        event = LayerCreated(user=user, layer_name=layer_name, ipfs_link=ipfs_link)
        with phase("event"):
            warnings = self._notify(POST_CREATE_LAYER, event.model_dump())

        logger.debug("Created layer %s for %s", layer_name, user)
        return ServiceResult(
            ok=True,
            op="create_layer",
            data=event.model_dump(),
            warnings=warnings,
        )

    @timed
    def resolve_link(self, user: str, layer_name: str) -> ServiceResult:
        """Return the link bound to *user*'s layer *layer_name*.

        The user's layer list is authoritative: a name absent from it is
        ``LAYER_NOT_FOUND`` regardless of the link table.

        Raises:
            RegistryIntegrityError: If the name is listed but has no link.
        """
        with self._registry.read() as txn:
            layers = txn.get_layers(user)
            if layers is None or layer_name not in layers:
                return ServiceResult.failure(
                    "resolve_link",
                    LayerErrorCode.LAYER_NOT_FOUND,
                    f"Layer {layer_name!r} not found for {user}",
                    user=user,
                    layer_name=layer_name,
                )
            link = txn.get_link(user, layer_name)

        if link is None:
            logger.error("Layer %s listed for %s without a link", layer_name, user)
            raise RegistryIntegrityError(user, layer_name)

        return ServiceResult(
            ok=True,
            op="resolve_link",
            data={"user": user, "layer_name": layer_name, "ipfs_link": link},
        )

    @timed
    def list_layers(self, user: str) -> ServiceResult:
        """Return *user*'s layer names in creation order (empty if none)."""
        with self._registry.read() as txn:
            layers = txn.get_layers(user) or []
        return ServiceResult(
            ok=True,
            op="list_layers",
            data={"user": user, "layers": layers, "count": len(layers)},
        )

    def whoami(self) -> ServiceResult:
        """Report the identity writes will be attributed to."""
        return ServiceResult(
            ok=True,
            op="whoami",
            data={"user": self._identity.current_user()},
        )
