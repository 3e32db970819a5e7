from collections.abc import Mapping
from functools import lru_cache


def to_list(value):
    """
    Normalize a single value or a sequence of values to a list.

    None is kept as None.

    Examples:
        >>> to_list('x'), to_list(('x', 'y')), to_list(None)
        (['x'], ['x', 'y'], None)
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def copy(dest, *sources):
    """
    Copy all keys of sources into dest. Later sources win.
    """
    for src in sources:
        if src:
            dest.update(src)
    return dest


def is_dunder(name: str) -> bool:
    """
    Return True for __special__ names.
    """
    return name.startswith("__") and name.endswith("__")


def value_property(value):
    """
    A read-only property that always returns value.
    """
    return property(lambda self: value)


def property_from_spec(spec):
    """
    Create a class member from a property specification.

    Args:
        spec:
            Either a mapping with "value" and an optional "writable" flag,
            a mapping with "get" and optional "set" functions, or any other
            object, which is returned as is.
    """
    if not isinstance(spec, Mapping):
        return spec
    if "get" in spec:
        return property(spec["get"], spec.get("set"))
    if "value" in spec:
        if spec.get("writable", False):
            return spec["value"]
        return value_property(spec["value"])
    return spec


@lru_cache(256)
def get_applier_name(name: str) -> str:
    """
    Return the name of the class method that applies the given processor.

    Examples:
        >>> get_applier_name('mixins')
        'apply_mixins'
    """
    return "apply_" + name


def is_junction(func) -> bool:
    """
    Return True if func was marked with the @junction decorator.
    """
    return getattr(func, "is_junction", False) is True
