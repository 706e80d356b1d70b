"""Pluggy hook specifications for galaxyctl registry events."""

from __future__ import annotations

import pluggy

PROJECT_NAME = "galaxyctl"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class GalaxyctlHookSpec:
    """Hook specifications for the galaxyctl plugin system."""

    @hookspec
    def post_create_layer(self, user: str, layer_name: str, ipfs_link: str) -> None:
        """Called after a layer is registered in *user*'s namespace.

        Delivery is best-effort. Implementations must not assume they
        run in the same thread, or the same process, as the write.
        """


HOOK_NAMES = ("post_create_layer",)
