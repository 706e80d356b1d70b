"""Tests for LayerService — create_layer, resolve_link, list_layers."""

from __future__ import annotations

import json
import random
import threading

import pytest
from sqlalchemy import insert, select

from galaxyctl.domain.identity import StaticIdentity
from galaxyctl.domain.layers import LayerErrorCode, RegistryIntegrityError
from galaxyctl.infrastructure.database.schema import layer_links, user_layers
from galaxyctl.infrastructure.registry import Registry
from galaxyctl.services.layers import LayerService
from tests.conftest import CALLER, create_layer_as

# ---------------------------------------------------------------------------
# create_layer
# ---------------------------------------------------------------------------


class TestCreateLayer:
    def test_success(self, layer_service: LayerService) -> None:
        result = layer_service.create_layer("Layer1", "ipfs://link1")
        assert result.ok
        assert result.op == "create_layer"
        assert result.error is None
        assert result.data == {
            "user": CALLER,
            "layer_name": "Layer1",
            "ipfs_link": "ipfs://link1",
        }

    def test_duplicate_rejected(self, layer_service: LayerService) -> None:
        assert layer_service.create_layer("Layer1", "ipfs://link1").ok
        result = layer_service.create_layer("Layer1", "ipfs://link2")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == LayerErrorCode.LAYER_ALREADY_EXISTS
        assert result.error.detail == {"user": CALLER, "layer_name": "Layer1"}

    def test_duplicate_keeps_first_link(self, layer_service: LayerService) -> None:
        layer_service.create_layer("Layer1", "ipfs://link1")
        layer_service.create_layer("Layer1", "ipfs://link2")
        result = layer_service.resolve_link(CALLER, "Layer1")
        assert result.data["ipfs_link"] == "ipfs://link1"

    def test_duplicate_leaves_state_unchanged(
        self, registry: Registry, layer_service: LayerService
    ) -> None:
        layer_service.create_layer("a", "ipfs://a")
        with registry.engine.connect() as conn:
            before_list = conn.execute(select(user_layers)).fetchall()
            before_links = conn.execute(select(layer_links)).fetchall()

        layer_service.create_layer("a", "ipfs://other")

        with registry.engine.connect() as conn:
            assert conn.execute(select(user_layers)).fetchall() == before_list
            assert conn.execute(select(layer_links)).fetchall() == before_links

    def test_names_are_case_sensitive(self, layer_service: LayerService) -> None:
        assert layer_service.create_layer("layer", "ipfs://lower").ok
        assert layer_service.create_layer("Layer", "ipfs://upper").ok
        assert layer_service.list_layers(CALLER).data["layers"] == ["layer", "Layer"]

    def test_link_is_not_validated(self, layer_service: LayerService) -> None:
        result = layer_service.create_layer("raw", "")
        assert result.ok
        assert layer_service.resolve_link(CALLER, "raw").data["ipfs_link"] == ""

    def test_empty_name_raises(self, registry: Registry, layer_service: LayerService) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            layer_service.create_layer("", "ipfs://x")
        assert layer_service.list_layers(CALLER).data["layers"] == []

    def test_writes_go_to_identity_namespace(self, registry: Registry) -> None:
        LayerService(registry, StaticIdentity("bob")).create_layer("terrain", "ipfs://t")
        assert LayerService(registry, StaticIdentity(CALLER)).list_layers("bob").data[
            "layers"
        ] == ["terrain"]
        assert (
            LayerService(registry, StaticIdentity(CALLER)).list_layers(CALLER).data["layers"]
            == []
        )

    def test_list_stored_whole(self, registry: Registry, layer_service: LayerService) -> None:
        for name in ("a", "b", "c"):
            layer_service.create_layer(name, f"ipfs://{name}")
        with registry.engine.connect() as conn:
            raw = conn.execute(
                select(user_layers.c.layers).where(user_layers.c.user == CALLER)
            ).scalar_one()
        assert json.loads(raw) == ["a", "b", "c"]

    def test_no_warnings_without_event_bus(self, layer_service: LayerService) -> None:
        assert layer_service.create_layer("quiet", "ipfs://q").warnings == []


# ---------------------------------------------------------------------------
# resolve_link
# ---------------------------------------------------------------------------


class TestResolveLink:
    def test_round_trip(self, layer_service: LayerService) -> None:
        layer_service.create_layer("Layer1", "ipfs://link1")
        result = layer_service.resolve_link(CALLER, "Layer1")
        assert result.ok
        assert result.op == "resolve_link"
        assert result.data["ipfs_link"] == "ipfs://link1"

    def test_unknown_user(self, layer_service: LayerService) -> None:
        result = layer_service.resolve_link("nobody", "Layer1")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == LayerErrorCode.LAYER_NOT_FOUND

    def test_unknown_name(self, layer_service: LayerService) -> None:
        layer_service.create_layer("Layer1", "ipfs://link1")
        result = layer_service.resolve_link(CALLER, "Layer2")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == LayerErrorCode.LAYER_NOT_FOUND

    def test_namespace_isolation(self, registry: Registry) -> None:
        create_layer_as(registry, "u1", "shared", "ipfs://u1")
        svc = LayerService(registry, StaticIdentity("u2"))
        result = svc.resolve_link("u2", "shared")
        assert result.error is not None
        assert result.error.code == LayerErrorCode.LAYER_NOT_FOUND

    def test_same_name_different_users(self, registry: Registry) -> None:
        create_layer_as(registry, "u1", "shared", "ipfs://u1")
        create_layer_as(registry, "u2", "shared", "ipfs://u2")
        svc = LayerService(registry, StaticIdentity("u3"))
        assert svc.resolve_link("u1", "shared").data["ipfs_link"] == "ipfs://u1"
        assert svc.resolve_link("u2", "shared").data["ipfs_link"] == "ipfs://u2"

    def test_list_is_authoritative(self, registry: Registry, layer_service: LayerService) -> None:
        """A link row with no list entry is still not found."""
        layer_service.create_layer("listed", "ipfs://listed")
        with registry.engine.begin() as conn:
            conn.execute(
                insert(layer_links).values(
                    user=CALLER, layer_name="orphan", ipfs_link="ipfs://o", created="x"
                )
            )
        result = layer_service.resolve_link(CALLER, "orphan")
        assert result.error is not None
        assert result.error.code == LayerErrorCode.LAYER_NOT_FOUND

    def test_missing_link_is_integrity_fault(
        self, registry: Registry, layer_service: LayerService
    ) -> None:
        layer_service.create_layer("broken", "ipfs://b")
        with registry.engine.begin() as conn:
            conn.execute(layer_links.delete().where(layer_links.c.layer_name == "broken"))
        with pytest.raises(RegistryIntegrityError) as excinfo:
            layer_service.resolve_link(CALLER, "broken")
        assert excinfo.value.user == CALLER
        assert excinfo.value.layer_name == "broken"

    def test_read_has_no_side_effects(
        self, registry: Registry, layer_service: LayerService
    ) -> None:
        layer_service.resolve_link("ghost", "x")
        with registry.engine.connect() as conn:
            assert conn.execute(select(user_layers)).fetchall() == []


# ---------------------------------------------------------------------------
# list_layers / whoami
# ---------------------------------------------------------------------------


class TestListLayers:
    def test_unknown_user_is_empty(self, layer_service: LayerService) -> None:
        result = layer_service.list_layers("nobody")
        assert result.ok
        assert result.data == {"user": "nobody", "layers": [], "count": 0}

    def test_insertion_order(self, layer_service: LayerService) -> None:
        for name in ("zeta", "alpha", "mid"):
            layer_service.create_layer(name, f"ipfs://{name}")
        result = layer_service.list_layers(CALLER)
        assert result.data["layers"] == ["zeta", "alpha", "mid"]
        assert result.data["count"] == 3

    def test_whoami(self, layer_service: LayerService) -> None:
        assert layer_service.whoami().data == {"user": CALLER}


# ---------------------------------------------------------------------------
# Registry-level properties
# ---------------------------------------------------------------------------


class TestRegistryProperties:
    def test_concrete_scenario(self, registry: Registry) -> None:
        svc = LayerService(registry, StaticIdentity("caller"))
        assert svc.create_layer("Layer1", "ipfs://link1").ok
        dup = svc.create_layer("Layer1", "ipfs://link2")
        assert dup.error is not None
        assert dup.error.code == "LAYER_ALREADY_EXISTS"
        assert svc.resolve_link("caller", "Layer1").data["ipfs_link"] == "ipfs://link1"
        missing = svc.resolve_link("caller", "Layer2")
        assert missing.error is not None
        assert missing.error.code == "LAYER_NOT_FOUND"

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_random_create_sequences(self, registry: Registry, seed: int) -> None:
        """List size equals accepted distinct names, and every listed name resolves."""
        rng = random.Random(seed)
        users = ["u1", "u2"]
        accepted: dict[str, dict[str, str]] = {u: {} for u in users}

        for i in range(40):
            user = rng.choice(users)
            name = f"layer-{rng.randint(0, 12)}"
            link = f"ipfs://{seed}/{i}"
            result = LayerService(registry, StaticIdentity(user)).create_layer(name, link)
            if name in accepted[user]:
                assert result.error is not None
                assert result.error.code == LayerErrorCode.LAYER_ALREADY_EXISTS
            else:
                assert result.ok
                accepted[user][name] = link

        reader = LayerService(registry, StaticIdentity("reader"))
        for user in users:
            layers = reader.list_layers(user).data["layers"]
            assert len(layers) == len(set(layers)) == len(accepted[user])
            assert layers == list(accepted[user])
            for name in layers:
                assert reader.resolve_link(user, name).data["ipfs_link"] == accepted[user][name]

    def test_concurrent_same_name(self, registry: Registry) -> None:
        """Racing writers for one user: exactly one wins."""
        svc = LayerService(registry, StaticIdentity(CALLER))
        outcomes: list[bool] = []
        lock = threading.Lock()

        def worker(i: int) -> None:
            result = svc.create_layer("contested", f"ipfs://{i}")
            with lock:
                outcomes.append(result.ok)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count(True) == 1
        assert svc.list_layers(CALLER).data["layers"] == ["contested"]

    def test_concurrent_distinct_names(self, registry: Registry) -> None:
        """Racing writers with distinct names never lose a list entry."""
        svc = LayerService(registry, StaticIdentity(CALLER))

        threads = [
            threading.Thread(target=svc.create_layer, args=(f"n{i}", f"ipfs://{i}"))
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        layers = svc.list_layers(CALLER).data["layers"]
        assert sorted(layers) == sorted(f"n{i}" for i in range(8))
        for name in layers:
            assert svc.resolve_link(CALLER, name).ok
