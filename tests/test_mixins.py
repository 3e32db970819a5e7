import pytest
from mock import patch

from metacomp import Base, MixinTable, apply_mixins, define, get_meta, mixin_id
from metacomp.exceptions import DuplicateMixinIdCollision
from metacomp.logging import log


@pytest.fixture
def moo():
    class M(Base):
        class Meta:
            mixin_id = "moo"

        @staticmethod
        def make():
            return "made"

        def foo(self):
            return "foo"

    return M


class TestMixinIds:
    def test_mixin_declared_id(self, moo):
        class D(Base):
            class Meta:
                mixins = [moo]

        D.get_meta().complete()
        assert D.make is moo.make
        assert D.foo is moo.foo
        assert D.mixins.moo is moo
        assert D.get_meta().mixins == {"moo": moo}

    def test_mixin_explicit_id(self, moo):
        class E(Base):
            class Meta:
                mixins = [("goo", moo)]

        E.get_meta().complete()
        assert E.make is moo.make
        assert E.foo is moo.foo
        assert E.mixins.goo is moo
        assert "moo" not in E.mixins
        with pytest.raises(AttributeError):
            E.mixins.moo

    def test_apply_mixins_with_explicit_id(self, moo):
        class D(Base):
            pass

        apply_mixins(D, [("customId", moo)])
        assert D.mixins.customId is moo
        assert "moo" not in D.mixins

    def test_anonymous_mixins_are_merged_but_not_addressable(self):
        class A(Base):
            def greet(self):
                return "A"

        class H(Base):
            class Meta:
                mixins = A

        assert H().greet() == "A"
        assert len(H.mixins) == 0
        assert [r.source for r in H.get_meta().mixin_records] == [A]
        assert H.get_meta().mixin_records[0].mixin_id is None

    def test_mixin_table_includes_ancestor_mixins(self, moo):
        class D(Base):
            class Meta:
                mixins = moo

        class E(D):
            pass

        E.get_meta().complete()
        assert isinstance(E.mixins, MixinTable)
        assert E.mixins.moo is moo
        assert dict(E.mixins) == {"moo": moo}
        assert E.get_meta().mixins == {}

    def test_mixin_id_decorator(self):
        @mixin_id("helper")
        class Helper(Base):
            pass

        assert get_meta(Helper).mixin_id == "helper"


class TestComposition:
    def test_host_members_win(self, moo):
        class H(Base):
            class Meta:
                mixins = moo

            def foo(self):
                return "host"

        instance = H()
        assert instance.foo() == "host"
        assert instance.mixins.moo.foo(instance) == "foo"
        assert "foo" not in H.get_meta().mixin_records[0].copied

    def test_declared_prototype_wins_over_mixins(self, moo):
        class H(Base):
            class Meta:
                mixins = moo
                prototype = {"foo": "proto"}

        assert H().foo == "proto"

    def test_later_mixins_replace_members_copied_from_earlier_ones(self):
        class A(Base):
            def greet(self):
                return "A"

        class B(Base):
            def greet(self):
                return "B"

        class H(Base):
            class Meta:
                mixins = [A, B]

        assert H().greet() == "B"

    def test_reapplying_is_idempotent(self, moo):
        class D(Base):
            pass

        assert len(D.apply_mixins(moo)) == 1
        assert D.apply_mixins(moo) == []
        assert len(D.get_meta().mixin_records) == 1

    def test_duplicate_id_collision(self, moo):
        class N(Base):
            class Meta:
                mixin_id = "moo"

        class H(Base):
            class Meta:
                mixins = [moo, N]

        with pytest.raises(DuplicateMixinIdCollision):
            H.get_meta().complete()
        assert not H.get_meta().completed

    def test_id_collision_leaves_host_untouched(self, moo):
        class N(Base):
            class Meta:
                mixin_id = "moo"

        class H(Base):
            class Meta:
                mixins = [moo, N]
                prototype = {"x": 1}
                static = {"y": 2}

        with pytest.raises(DuplicateMixinIdCollision):
            H()

        meta = H.get_meta()
        assert "make" not in vars(H)
        assert "x" not in vars(H)
        assert "y" not in vars(H)
        assert meta.mixins == {}
        assert meta.mixin_records == []
        assert not meta.completed

    def test_id_collision_in_single_call_applies_nothing(self, moo):
        class N(Base):
            def other(self):
                pass

        class D(Base):
            pass

        with pytest.raises(DuplicateMixinIdCollision):
            D.apply_mixins(moo, ("moo", N))
        assert "foo" not in vars(D)
        assert D.get_meta().mixin_records == []

    def test_id_collision_with_applied_mixin(self, moo):
        class N(Base):
            class Meta:
                mixin_id = "moo"

            def other(self):
                pass

        class D(Base):
            pass

        D.apply_mixins(moo)
        with pytest.raises(DuplicateMixinIdCollision):
            D.apply_mixins(N)
        assert "other" not in vars(D)
        assert D.mixins.moo is moo

    def test_mixin_inheritance_members_are_copied(self):
        class A(Base):
            def a(self):
                return "a"

        class B(A):
            def b(self):
                return "b"

        class H(Base):
            class Meta:
                mixins = B

        instance = H()
        assert (instance.a(), instance.b()) == ("a", "b")

    def test_mixin_configs_are_registered(self):
        class A(Base):
            class Meta:
                config = {"color": "red"}

        class H(Base):
            class Meta:
                mixins = A

        assert H().color == "red"
        assert "color" in H.get_meta().configs
        assert "color" in H().__dict__

    def test_mixing_into_completed_class_rebuilds_chains(self):
        log_ = []

        class A(Base):
            def ctor(self):
                log_.append("A")

        class H(Base):
            pass

        H()
        assert not H.get_meta().live_chains["ctor"]

        H.apply_mixins(A)
        assert H.get_meta().live_chains["ctor"]
        H()
        assert log_ == ["A"]

    def test_hidden_mixin_members_are_logged(self, moo):
        class H(Base):
            class Meta:
                mixins = moo

            def foo(self):
                return "host"

        with patch.object(log, "debug") as debug:
            H.get_meta().complete()

        messages = [call.args[0] for call in debug.call_args_list]
        assert any("hides" in msg and "foo" in msg for msg in messages)


class TestPlainClasses:
    def test_define_adopts_plain_class(self):
        @define(processors="extra", extra=3)
        class Plain:
            @classmethod
            def apply_extra(cls, value):
                cls.extra_value = value

        meta = Plain.get_meta()
        assert get_meta(Plain) is meta
        assert isinstance(Plain.mixins, MixinTable)
        meta.complete()
        assert Plain.extra_value == 3

    def test_subclass_of_plain_class_is_adopted_on_demand(self):
        @define(processors="extra")
        class Plain:
            pass

        class Child(Plain):
            pass

        meta = Child.get_meta()
        assert meta is not Plain.get_meta()
        assert meta.super_meta is Plain.get_meta()
        assert [p.name for p in meta.get_processors()] == ["extra"]

    def test_adopted_class_methods(self, moo):
        class A(Base):
            def greet(self):
                return "A"

        class Plain:
            pass

        meta = get_meta(Plain)
        assert Plain.get_meta() is meta
        assert Plain.define(prototype={"x": 1}) is Plain
        assert meta.declaration == {"prototype": {"x": 1}}

        records = Plain.apply_mixins(moo, ("a", A))
        assert [r.source for r in records] == [moo, A]
        assert Plain.mixins.moo is moo
        assert Plain.mixins.a is A
        assert Plain().greet() == "A"

    def test_plain_class_can_be_a_mixin(self):
        class Plain:
            def hello(self):
                return "hello"

        class H(Base):
            class Meta:
                mixins = ("plain", Plain)

        assert H().hello() == "hello"
        assert H.mixins.plain is Plain
