import threading

from endpoint_dsl.core.endpoint import Endpoint
from endpoint_dsl.core.registry import EndpointRegistry


class TestEndpointRegistry:
    def test_register_keeps_order(self, registry):
        a = Endpoint(method="GET", path="/a")
        b = Endpoint(method="POST", path="/b")
        registry.register(a)
        registry.register(b)
        assert registry.all() == (a, b)
        assert list(registry) == [a, b]
        assert len(registry) == 2

    def test_same_object_registered_once(self, registry):
        a = Endpoint(method="GET", path="/a")
        registry.register(a)
        registry.register(a)
        assert len(registry) == 1

    def test_equal_but_distinct_endpoints_are_kept(self, registry):
        registry.register(Endpoint(method="GET", path="/a"))
        registry.register(Endpoint(method="GET", path="/a"))
        assert len(registry) == 2

    def test_find_by(self, registry):
        a = registry.register(Endpoint(method="GET", path="/a"))
        registry.register(Endpoint(method="POST", path="/a"))
        assert registry.find_by("get", "/a") == [a]
        assert registry.find_by("DELETE", "/a") == []

    def test_snapshot_is_not_affected_by_reset(self, registry):
        registry.register(Endpoint(method="GET", path="/a"))
        snapshot = registry.all()
        registry.reset()
        assert len(snapshot) == 1
        assert registry.all() == ()

    def test_concurrent_registration(self):
        registry = EndpointRegistry()

        def worker():
            for _ in range(50):
                registry.register(Endpoint(method="GET", path="/a"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(registry) == 400

    def test_empty_registry_is_still_usable_as_injected_registry(self, registry):
        from endpoint_dsl.dsl import get

        ep = get("/x", registry).build()
        assert registry.all() == (ep,)
