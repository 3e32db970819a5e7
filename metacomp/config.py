"""
Per-instance configuration values.

Config properties are declared under the "config" key of a class declaration
and installed on the class as data descriptors::

    class Panel(Base):
        class Meta:
            config = {
                'title': 'untitled',
                'items': lazy(list),
                'style': merge(merge_dicts)({'color': 'black'}),
            }
"""
from copy import copy
from typing import Callable, Optional

__all__ = ["Config", "as_config"]


class Config:
    """
    Descriptor for a single configuration property.

    Args:
        default:
            Value returned while the property was not assigned.
        lazy:
            If True, the default is only materialized on first access. Callable
            defaults of lazy configs are used as factories.
        merge:
            A function merge(value, old) -> new used when the property is
            assigned over an existing value.
    """

    name: Optional[str] = None
    owner: Optional[type] = None

    def __init__(self, default=None, *, lazy=False, merge: Callable = None):
        self.default = default
        self.lazy = lazy
        self.merge = merge

    def __repr__(self):
        flags = ""
        if self.lazy:
            flags += ", lazy=True"
        if self.merge is not None:
            flags += f", merge={self.merge.__name__}"
        return f"Config({self.name!r}, default={self.default!r}{flags})"

    def __set_name__(self, owner, name):
        self.owner = owner
        self.name = name

    def __get__(self, instance, cls=None):
        if instance is None:
            return self
        try:
            return instance.__dict__[self.name]
        except KeyError:
            pass
        if self.lazy:
            return self.initialize(instance)
        return self.default

    def __set__(self, instance, value):
        if self.merge is not None:
            old = self.__get__(instance)
            if old is not None:
                value = self.merge(value, old)
        instance.__dict__[self.name] = value

    def __delete__(self, instance):
        instance.__dict__.pop(self.name, None)

    def copy(self, **kwargs) -> "Config":
        """
        Return a copy of config overriding the given options.
        """
        kwargs.setdefault("lazy", self.lazy)
        kwargs.setdefault("merge", self.merge)
        return Config(kwargs.pop("default", self.default), **kwargs)

    def is_set(self, instance) -> bool:
        """
        Return True if property was assigned or initialized on instance.
        """
        return self.name in instance.__dict__

    def initialize(self, instance):
        """
        Store a copy of the default value in the instance and return it.
        """
        value = self.default
        if self.lazy and callable(value):
            value = value()
        else:
            value = copy(value)
        instance.__dict__[self.name] = value
        return value


def as_config(value) -> Config:
    """
    Wrap a plain default value in a Config object.
    """
    if isinstance(value, Config):
        return value
    return Config(value)
