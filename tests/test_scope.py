import unittest

from troupe import (
    Container,
    factory,
    scoped,
    singleton,
    singleton_factory,
    transient,
    transient_factory,
)


class Instance: ...


def test_bare_class_is_registered_as_scoped():
    container = Container.create({"instance": Instance})

    assert container.resolve("instance") is container.resolve("instance")
    assert container.create_child().resolve("instance") is not container.resolve("instance")


class TestScopedScope(unittest.TestCase):
    def setUp(self):
        self.parent = Container.create(
            {
                "class_instance": scoped(Instance),
                "factory_instance": factory(lambda _: Instance()),
            }
        )
        self.child = self.parent.create_child()
        self.grandchild = self.child.create_child()

    def test_child_gets_its_own_instance(self):
        assert self.child.resolve("class_instance") is not self.parent.resolve("class_instance")
        assert self.child.resolve("factory_instance") is not self.parent.resolve("factory_instance")

    def test_same_container_reuses_instance(self):
        first = self.child.resolve("class_instance")
        second = self.child.resolve("class_instance")
        assert second is first, "SCOPED should return the instance cached in the resolving container"

    def test_grandchild_is_isolated_from_child(self):
        child_instance = self.child.resolve("factory_instance")
        grandchild_instance = self.grandchild.resolve("factory_instance")

        assert grandchild_instance is not child_instance
        assert self.grandchild.resolve("factory_instance") is grandchild_instance

    def test_sibling_containers_are_isolated(self):
        sibling = self.parent.create_child()
        assert sibling.resolve("class_instance") is not self.child.resolve("class_instance")


class TestSingletonScope(unittest.TestCase):
    def setUp(self):
        self.parent = Container.create(
            {
                "class_instance": singleton(Instance),
                "factory_instance": singleton_factory(lambda _: Instance()),
            }
        )
        self.child = self.parent.create_child()
        self.grandchild = self.child.create_child()

    def test_descendants_share_parent_instance(self):
        for name in ("class_instance", "factory_instance"):
            parent_instance = self.parent.resolve(name)
            assert self.child.resolve(name) is parent_instance
            assert self.grandchild.resolve(name) is parent_instance

    def test_independent_subtrees_get_their_own_instance(self):
        root = Container.create()
        left = root.create_child({"service": singleton(Instance)})
        right = root.create_child({"service": singleton(Instance)})

        assert left.resolve("service") is not right.resolve("service")
        assert left.create_child().resolve("service") is left.resolve("service")
        assert right.create_child().resolve("service") is right.resolve("service")

    def test_singleton_instances_live_in_root(self):
        instance = self.grandchild.resolve("class_instance")
        assert instance is self.parent.resolve("class_instance")
        assert "class_instance@0" in self.parent._singletons  # noqa: SLF001
        assert "class_instance" not in self.grandchild._cache  # noqa: SLF001


class TestTransientScope(unittest.TestCase):
    def setUp(self):
        self.parent = Container.create(
            {
                "class_instance": transient(Instance),
                "factory_instance": transient_factory(lambda _: Instance()),
            }
        )
        self.child = self.parent.create_child()

    def test_every_resolution_builds_a_new_instance(self):
        for name in ("class_instance", "factory_instance"):
            assert self.parent.resolve(name) is not self.parent.resolve(name)
            assert self.child.resolve(name) is not self.child.resolve(name)
            assert self.child.resolve(name) is not self.parent.resolve(name)

    def test_transient_instances_are_never_cached(self):
        self.child.resolve("class_instance")
        assert len(self.child._cache) == 0  # noqa: SLF001
        assert len(self.parent._singletons) == 0  # noqa: SLF001
