import pytest

from metacomp import Base, Config, lazy, merge


def merge_dicts(value, old):
    return {**old, **value}


@pytest.fixture
def panel():
    events = []

    def get_size(self):
        return self.__dict__.get("_size", 0)

    def set_size(self, value):
        events.append(("size", value, self.configuring))
        self._size = value

    class Panel(Base):
        class Meta:
            processors = {"counter": "config"}
            properties = {"size": {"get": get_size, "set": set_size}}
            config = {
                "title": "untitled",
                "items": lazy(list),
                "style": merge(merge_dicts)({"color": "black"}),
            }
            counter = 1

        @classmethod
        def apply_counter(cls, value):
            events.append(("counter", value))

    Panel.events = events
    return Panel


class TestConfigValues:
    def test_defaults(self, panel):
        p = panel()
        assert p.title == "untitled"
        assert p.style == {"color": "black"}
        assert p.items == []
        assert not p.configuring

    def test_config_dict_and_keywords(self, panel):
        assert panel({"title": "a"}).title == "a"
        assert panel(title="b").title == "b"
        assert panel({"title": "a"}, title="c").title == "c"

    def test_declared_configs_are_descriptors(self, panel):
        panel.get_meta().complete()
        cfg = panel.title
        assert isinstance(cfg, Config)
        assert (cfg.name, cfg.owner, cfg.default) == ("title", panel, "untitled")
        assert set(panel.get_meta().configs) == {"title", "items", "style"}

    def test_eager_configs_are_stored_on_construction(self, panel):
        p = panel()
        assert p.__dict__["title"] == "untitled"
        assert "items" not in p.__dict__

    def test_lazy_factory_runs_per_instance(self, panel):
        a, b = panel(), panel()
        a.items.append(1)
        assert a.items == [1]
        assert b.items == []
        assert a.items is not b.items

    def test_lazy_plain_value(self):
        class Foo(Base):
            class Meta:
                config = {"name": lazy("foo")}

        foo = Foo()
        assert "name" not in foo.__dict__
        assert foo.name == "foo"
        assert foo.__dict__["name"] == "foo"

    def test_mutable_defaults_are_copied_per_instance(self):
        class Foo(Base):
            class Meta:
                config = {"tags": [], "options": {"a": 1}}

        a, b = Foo(), Foo()
        a.tags.append("x")
        a.options["b"] = 2
        assert b.tags == []
        assert b.options == {"a": 1}
        assert Foo.tags.default == []
        assert Foo.options.default == {"a": 1}

    def test_merge_with_default(self, panel):
        p = panel(style={"weight": "bold"})
        assert p.style == {"color": "black", "weight": "bold"}

    def test_merge_on_assignment(self, panel):
        p = panel()
        p.style = {"size": 2}
        assert p.style == {"color": "black", "size": 2}

    def test_delete_restores_default(self, panel):
        p = panel(title="x")
        del p.title
        assert p.title == "untitled"

    def test_unknown_keys_are_assigned_as_attributes(self, panel):
        p = panel(extra=42)
        assert p.extra == 42
        assert "extra" not in panel.get_meta().configs

    def test_properties_are_assigned_while_configuring(self, panel):
        p = panel(size=3)
        assert p.size == 3
        assert ("size", 3, True) in panel.events

        p.size = 4
        assert panel.events[-1] == ("size", 4, False)


class TestReconfigure:
    def test_configure_is_single_shot(self, panel):
        p = panel(title="first")
        p.configure({"title": "second"})
        assert p.title == "first"

    def test_reconfigure_assigns_values(self, panel):
        p = panel()
        p.reconfigure(title="new", style={"weight": "bold"})
        assert p.title == "new"
        assert p.style == {"color": "black", "weight": "bold"}
        assert not p.configuring

    def test_reconfigure_sets_configuring_flag(self, panel):
        p = panel()
        p.reconfigure({"size": 7})
        assert panel.events[-1] == ("size", 7, True)

    def test_reconfigure_does_not_run_processors(self, panel):
        p = panel()
        p.reconfigure(title="new")
        panel()
        assert [e for e in panel.events if e[0] == "counter"] == [("counter", 1)]

    def test_reconfigure_does_not_touch_other_values(self, panel):
        p = panel(title="x")
        p.items.append(1)
        p.reconfigure(style={})
        assert p.title == "x"
        assert p.items == [1]


class TestInheritedConfigs:
    def test_subclass_inherits_configs(self, panel):
        class Sub(panel):
            pass

        s = Sub()
        assert s.title == "untitled"
        assert Sub.get_meta().configs["title"] is panel.get_meta().configs["title"]

    def test_subclass_overrides_default_and_keeps_merge(self, panel):
        class Sub(panel):
            class Meta:
                config = {"style": {"color": "red"}}

        assert Sub().style == {"color": "red"}
        assert Sub(style={"weight": 1}).style == {"color": "red", "weight": 1}
        assert panel().style == {"color": "black"}
        assert Sub.style is not panel.style
        assert Sub.style.merge is merge_dicts

    def test_subclass_adds_configs(self, panel):
        class Sub(panel):
            class Meta:
                config = {"visible": True}

        Sub.get_meta().complete()
        assert set(Sub.get_meta().configs) == {"title", "items", "style", "visible"}
        assert "visible" not in panel.get_meta().configs
        assert Sub(visible=False).visible is False

    def test_explicit_config_objects(self):
        shared = Config(0, lazy=True)

        class Foo(Base):
            class Meta:
                config = {"count": shared}

        class Bar(Base):
            class Meta:
                config = {"count": shared}

        Foo(), Bar()
        assert Foo.count is shared
        assert Bar.count is not shared
        assert Bar.count.owner is Bar
