"""
Method chains.

A chain is a method name that is invoked on every level of the class hierarchy
(and on every mixin) that defines it, instead of only on the most derived
implementation. Implementations do not need to call super().
"""
from typing import Callable, List, NamedTuple, Optional, Tuple

__all__ = ["ChainSpec", "Participant", "contributors", "build_chain", "defines"]


class Participant(NamedTuple):
    """
    A class or mixin that defines a chain method directly.
    """

    owner: type
    function: Callable

    def bind(self, instance):
        func = self.function
        if hasattr(func, "__get__"):
            return func.__get__(instance, type(instance))
        return func


class ChainSpec(NamedTuple):
    """
    Resolved implementations of a chain in forward (base first) order.
    """

    name: str
    participants: Tuple[Participant, ...]

    def __bool__(self):
        return bool(self.participants)

    @property
    def owners(self) -> List[type]:
        return [p.owner for p in self.participants]

    def call(self, instance, args=(), reverse=False):
        """
        Call every implementation bound to instance.
        """
        participants = self.participants
        if reverse:
            participants = reversed(participants)
        for participant in participants:
            participant.bind(instance)(*args)


def contributors(cls: type, seen: Optional[set] = None) -> List[type]:
    """
    Return classes that contribute behavior to cls in forward order.

    Bases come before derived classes. Mixins applied to a class are placed
    after the class' own bases and before the class itself. Each class
    appears at most once.
    """
    from .meta import own_meta

    seen = set() if seen is None else seen
    result = []

    for klass in reversed(cls.__mro__):
        if klass in seen or klass is object:
            continue
        seen.add(klass)

        meta = own_meta(klass)
        if meta is not None:
            for record in meta.mixin_records:
                if record.source not in seen:
                    result.extend(contributors(record.source, seen))
        result.append(klass)
    return result


def build_chain(name: str, classes: List[type]) -> ChainSpec:
    """
    Create the ChainSpec for the given name from a list of contributors.
    """
    participants = tuple(
        Participant(klass, vars(klass)[name])
        for klass in classes
        if defines(klass, name)
    )
    return ChainSpec(name, participants)


def defines(klass: type, name: str) -> bool:
    """
    Return True if klass defines name itself.

    Members that were copied into klass from one of its mixins do not count,
    since the mixin contributes them on its own.
    """
    if name not in vars(klass):
        return False
    from .meta import own_meta

    meta = own_meta(klass)
    if meta is None:
        return True
    return not any(name in record.copied for record in meta.mixin_records)
