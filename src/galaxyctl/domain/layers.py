"""Layer registry vocabulary: error codes, events, and name rules.

A layer is a named unit owned by a single user and bound to one link.
Names are unique per user, never globally.

INVARIANT: A (user, layer_name) binding never changes once created.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class LayerErrorCode(StrEnum):
    """The only two failure outcomes the registry reports."""

    LAYER_ALREADY_EXISTS = "LAYER_ALREADY_EXISTS"
    LAYER_NOT_FOUND = "LAYER_NOT_FOUND"


class LayerCreated(BaseModel):
    """Notification payload emitted after a layer is registered."""

    model_config = {"frozen": True}

    user: str
    layer_name: str
    ipfs_link: str


class RegistryIntegrityError(RuntimeError):
    """A layer listed for a user has no link binding.

    Raised only when the list and link table have drifted apart, which
    means something outside the registry wrote to the store.
    """

    def __init__(self, user: str, layer_name: str) -> None:
        super().__init__(f"Layer {layer_name!r} is listed for {user!r} but has no link")
        self.user = user
        self.layer_name = layer_name


def validate_layer_name(layer_name: str) -> str:
    """Return *layer_name* unchanged, or raise ValueError if it is empty.

    Names are compared by exact string match, so no normalization happens.
    """
    if not layer_name:
        msg = "Layer name must be a non-empty string"
        raise ValueError(msg)
    return layer_name
