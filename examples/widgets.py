"""
Tiny widget toolkit built with metacomp.

It shows the main features of the library:

1) ctor/dtor chains run on every level of the hierarchy and on mixins.
2) Config values with defaults, lazy initialization and merging.
3) A custom "handlers" processor that runs after mixins were applied.
4) A junction method that combines the implementations of its base class
   and of a mixin.
"""

from metacomp import Base, junction, lazy, merge, mixin_id


#
# HELPERS
#
def merge_dicts(value, old):
    return {**old, **value}


#
# WIDGETS
#
class Widget(Base):
    """
    Base widget class.

    The "handlers" declaration maps event names to method names.
    """

    class Meta:
        processors = {"handlers": "mixins"}
        prototype = {"tag": "div"}
        static = {"handler_table": {}}
        config = {
            "title": "untitled",
            "style": merge(merge_dicts)({"color": "black"}),
            "history": lazy(list),
        }

    @classmethod
    def apply_handlers(cls, handlers):
        cls.handler_table = {**cls.handler_table, **handlers}

    def ctor(self):
        self.history.append("widget")

    def dtor(self):
        self.history.append("~widget")

    def emit(self, event, *args):
        """
        Call the handler registered for event, if any.
        """
        try:
            name = self.handler_table[event]
        except KeyError:
            return None
        return getattr(self, name)(*args)

    def render(self):
        return f"<{self.tag} title={self.title!r}>"


@mixin_id("focusable")
class Focusable(Base):
    has_focus = False

    def ctor(self):
        self.history.append("focusable")

    def dtor(self):
        self.history.append("~focusable")

    def focus(self):
        self.has_focus = True
        return "focused"

    def render(self):
        return "[focus]"


class Button(Widget):
    class Meta:
        mixins = [Focusable]
        prototype = {"tag": "button"}
        handlers = {"click": "on_click", "focus": "focus"}
        config = {"label": "OK"}

    def ctor(self):
        self.history.append("button")

    def on_click(self):
        return f"clicked {self.label}"

    @junction
    def render(self):
        parts = self.call_junction(Button, "render")
        return "".join(parts) + self.label


def demo():
    """
    Create, use and destroy a button, printing what happens.
    """
    button = Button(title="save", label="Save")
    print(button.render())
    print(button.emit("click"))
    print(button.emit("focus"))
    button.reconfigure(style={"weight": "bold"})
    print(sorted(button.style.items()))
    button.destroy()
    print(" ".join(button.history))


if __name__ == "__main__":
    demo()
