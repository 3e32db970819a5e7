"""
Mixin composition.

Mixins are classes whose members are copied into a host class without
becoming its bases. The host keeps a reference to every mixin under its id,
so methods that hide a mixin member can still reach it::

    class Helper(Base):
        class Meta:
            mixin_id = 'helper'

        def something(self, x):
            ...

    class Foo(Base):
        class Meta:
            mixins = [Helper]

        def something(self, x):
            return self.mixins.helper.something(self, x)
"""
from collections.abc import Mapping
from typing import Iterator, List, Optional, Set, Tuple

from sidekick import alias

from .exceptions import DuplicateMixinIdCollision
from .logging import log
from .utils import is_dunder, is_junction

__all__ = [
    "MixinRecord",
    "MixinTable",
    "apply_mixins",
    "apply_mixins_method",
    "normalize_mixins",
    "plan_mixins",
]

#: Class attributes owned by the engine itself. They are never copied.
RESERVED = frozenset({"_meta", "mixins", "Meta", "get_meta", "define", "apply_mixins"})


class MixinRecord:
    """
    A mixin applied to a host class.
    """

    mixin_id = alias("id")

    def __init__(self, mixin_id: Optional[str], source: type):
        self.id = mixin_id
        self.source = source
        self.copied: Set[str] = set()

    def __repr__(self):
        return f"MixinRecord({self.id!r}, {self.source.__name__})"


class MixinTable(Mapping):
    """
    Read-only view of the mixins addressable from a class and its instances.

    Mixins are looked up in the class metadata and then in the metadata of its
    ancestors.
    """

    __slots__ = ("_meta",)

    def __init__(self, meta):
        self._meta = meta

    def _tables(self):
        meta = self._meta
        while meta is not None:
            yield meta.mixins
            meta = meta.super_meta

    def __getitem__(self, key):
        for table in self._tables():
            if key in table:
                return table[key]
        raise KeyError(key)

    def __getattr__(self, attr):
        try:
            return self[attr]
        except KeyError:
            raise AttributeError(attr) from None

    def __iter__(self) -> Iterator[str]:
        keys = {}
        for table in self._tables():
            keys.update(dict.fromkeys(table))
        return iter(keys)

    def __len__(self):
        return sum(1 for _ in self)

    def __repr__(self):
        data = ", ".join(f"{k}={v.__name__}" for k, v in self.items())
        return f"MixinTable({data})"


def normalize_mixins(entries) -> List[Tuple[Optional[str], type]]:
    """
    Normalize a mixins declaration to a list of (explicit id, class) pairs.

    Entries may be a class, an (id, class) pair or a list of those.
    """
    if entries is None:
        return []
    if isinstance(entries, type) or is_pair(entries):
        entries = [entries]

    result = []
    for entry in entries:
        if isinstance(entry, type):
            result.append((None, entry))
        elif is_pair(entry):
            result.append((entry[0], entry[1]))
        else:
            raise TypeError(f"invalid mixin declaration: {entry!r}")
    return result


def is_pair(entry) -> bool:
    return (
        isinstance(entry, (tuple, list))
        and len(entry) == 2
        and (entry[0] is None or isinstance(entry[0], str))
        and isinstance(entry[1], type)
    )


def plan_mixins(host: type, entries) -> List[Tuple[Optional[str], type]]:
    """
    Resolve the effective id of each mixin in entries and check it against the
    ids bound on host and on earlier entries.

    Host is never modified. Returns the (id, class) pairs that still must be
    applied, skipping mixins that were already applied.
    """
    from .meta import get_meta

    meta = get_meta(host)
    bound = dict(meta.mixins)
    applied = [r.source for r in meta.mixin_records]
    plan = []

    for explicit_id, source in normalize_mixins(entries):
        mixin_id = explicit_id or get_meta(source).mixin_id

        if mixin_id is not None and mixin_id in bound:
            current = bound[mixin_id]
            if current is source:
                log.debug(f"mixin {mixin_id!r} already applied to {meta.fullname}")
                continue
            raise DuplicateMixinIdCollision(host, mixin_id, current, source)
        if source in applied:
            log.debug(f"{source.__name__} already mixed into {meta.fullname}")
            continue

        if mixin_id is not None:
            bound[mixin_id] = source
        applied.append(source)
        plan.append((mixin_id, source))
    return plan


def apply_mixins(host: type, entries) -> List[MixinRecord]:
    """
    Copy members of each mixin into host and register them by id.

    Returns the list of records created by this call. Mixins that were
    already applied are skipped. Id collisions are detected before host is
    touched.
    """
    from .meta import get_meta

    meta = get_meta(host)
    plan = plan_mixins(host, entries)
    for _, source in plan:
        get_meta(source).complete()

    created = []
    for mixin_id, source in plan:
        source_meta = get_meta(source)

        # Chain names must be known before copying, so chain methods are
        # never copied to the host.
        meta.register_chains(source_meta.chain_names)

        record = MixinRecord(mixin_id, source)
        copy_members(host, record, meta)
        for name, cfg in source_meta.configs.items():
            if name in record.copied:
                meta.configs.setdefault(name, cfg)
        meta.mixin_records.append(record)
        if mixin_id is not None:
            meta.mixins[mixin_id] = source
        created.append(record)
        log.debug(
            f"mixin {source_meta.fullname} applied to {meta.fullname} "
            f"(id={mixin_id!r}, copied={sorted(record.copied)})"
        )

    if created and meta.completed:
        meta.build_chains()
    return created


def apply_mixins_method(cls, *mixins) -> List[MixinRecord]:
    """
    Class method form of apply_mixins(), called as cls.apply_mixins(A, B, ...).
    """
    return apply_mixins(cls, mixins[0] if len(mixins) == 1 else list(mixins))


def copy_members(host: type, record: MixinRecord, meta):
    """
    Copy the members of record.source that host does not declare itself.
    """
    host_mro = set(host.__mro__)
    mixin_copied = set()
    for other in meta.mixin_records:
        mixin_copied.update(other.copied)
    skip = RESERVED | meta.chain_names

    members = {}
    for klass in reversed(record.source.__mro__):
        if klass in host_mro:
            continue
        for name, value in vars(klass).items():
            if is_dunder(name) or name in skip:
                continue
            members[name] = value

    for name, value in members.items():
        if name in vars(host) and name not in mixin_copied:
            kind = "junction" if is_junction(vars(host)[name]) else "member"
            log.debug(f"{meta.fullname}.{name} {kind} hides {record.source.__name__}.{name}")
            continue
        setattr(host, name, value)
        record.copied.add(name)
