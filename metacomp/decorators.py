"""
Decorators that attach declarations to classes, methods and config values.
"""
from .config import Config, as_config
from .meta import get_meta

__all__ = ["define", "mixin_id", "junction", "lazy", "merge"]


#
# Classes
#
def define(options=None, **kwargs):
    """
    Add a declaration fragment to a class.

    Plain classes are adopted by the composition engine. For example::

        @define(chains='init')
        class Foo(Base):
            def __init__(self, config=None):
                super().__init__(config)
                self.call_chain('init')

            def init(self):
                ...
    """

    def decorator(cls):
        get_meta(cls).define(options, **kwargs)
        return cls

    return decorator


def mixin_id(value: str):
    """
    Declare the id under which a mixin is registered by its hosts.

    For example::

        @mixin_id('helper')
        class Helper(Base):
            def something(self, x):
                ...

        @define(mixins=[Helper])
        class Foo(Base):
            def something(self, x):
                # hides Helper.something, which is still reachable
                return self.mixins.helper.something(self, x)
    """

    def decorator(cls):
        get_meta(cls).define(mixin_id=value)
        return cls

    return decorator


#
# Methods
#
def junction(func):
    """
    Mark a method that explicitly calls the implementations of all of its
    base classes and mixins.

    For example::

        class Foo(Bar):
            @junction
            def method(self, x):
                self.call_junction(Foo, 'method', x)
                ...
    """
    func.is_junction = True
    return func


#
# Configs
#
def lazy(value) -> Config:
    """
    Declare a config that is only initialized on first access.
    """
    cfg = as_config(value)
    return cfg.copy(lazy=True)


def merge(func):
    """
    Declare a config whose new values are merged with the current ones by
    calling func(value, old).
    """

    def decorator(value) -> Config:
        return as_config(value).copy(merge=func)

    return decorator
