"""
Processors are named units of class-definition behavior.

Each processor is applied by calling the "apply_<name>" class method of the
class being completed, passing the value declared for <name>. Processors may
declare ordering constraints against each other.

For example::

    class Foo(Base):
        class Meta:
            processors = {
                'config': 'mixins',

                # Equivalent to:
                'config': {'after': 'mixins'},
            }

        @classmethod
        def apply_config(cls, value):
            ...
"""
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional

from .exceptions import CircularProcessorDependency, UnresolvedOrderingTarget
from .utils import get_applier_name, to_list

__all__ = ["Processor", "ProcessorList", "decode", "normalize_declaration"]


class Processor:
    """
    Ordering specification of a single processor.
    """

    name: str
    applier: str
    after: Optional[List[str]] = None
    before: Optional[List[str]] = None
    inherited: bool = False

    # Transient sorting state
    sorting: bool = False
    sorted: bool = False

    def __init__(self, name: str, options=None):
        self.name = name
        self.applier = get_applier_name(name)

        if options:
            if isinstance(options, str):
                self.after = [options]
            elif isinstance(options, Mapping):
                self.after = to_list(options.get("after")) or None
                self.before = to_list(options.get("before")) or None
            else:
                self.after = to_list(options) or None

    def __repr__(self):
        extra = []
        if self.after:
            extra.append(f"after={self.after!r}")
        if self.before:
            extra.append(f"before={self.before!r}")
        if self.inherited:
            extra.append("inherited=True")
        args = "".join(", " + x for x in extra)
        return f"Processor({self.name!r}{args})"

    def clone(self) -> "Processor":
        """
        Return an unsorted copy of processor with the same constraints.
        """
        options = {}
        if self.after:
            options["after"] = list(self.after)
        if self.before:
            options["before"] = list(self.before)
        return Processor(self.name, options or None)

    def sort(self, state: "SortState"):
        """
        Emit processor into the sorted list after all its dependencies.
        """
        if self.sorted:
            return

        name = self.name
        path = state.path
        path.append(name)

        if self.sorting:
            raise CircularProcessorDependency(path)
        self.sorting = True

        for after in (self.after, state.afters.get(name)):
            for dep in after or ():
                try:
                    target = state.map[dep]
                except KeyError:
                    raise UnresolvedOrderingTarget(name, dep, "after")
                target.sort(state)

        self.sorting = False
        self.sorted = True
        path.pop()
        state.sorted.append(self)

    def sort_key(self):
        return not self.inherited, self.name


class ProcessorList(list):
    """
    Sorted list of processors.

    The by_name attribute maps names to the corresponding processors.
    """

    by_name: Dict[str, Processor]

    def __init__(self, processors=(), by_name=None):
        super().__init__(processors)
        self.by_name = by_name if by_name is not None else {p.name: p for p in self}

    def names(self) -> List[str]:
        return [p.name for p in self]


class SortState:
    """
    Mutable state shared by a single sort pass.
    """

    def __init__(self, processors: Dict[str, Processor]):
        self.map = processors
        self.afters: Dict[str, List[str]] = {}
        self.path: List[str] = []
        self.sorted = ProcessorList(by_name=processors)


def normalize_declaration(declaration) -> dict:
    """
    Convert any accepted form of a processors declaration to a dictionary
    mapping names to their ordering options.
    """
    if declaration is None:
        return {}
    if isinstance(declaration, str):
        return {declaration: None}
    if isinstance(declaration, Mapping):
        return dict(declaration)
    return {name: None for name in declaration}


def decode(declaration, inherited: Iterable[Processor] = ()) -> ProcessorList:
    """
    Decode a processors declaration and merge it with inherited processors.

    Args:
        declaration:
            A processor name, a sequence of names or a mapping from names to
            ordering options. Options are either None, the name (or a sequence
            of names) of processors that must run before, or a mapping with
            "after" and/or "before" keys.
        inherited:
            The sorted list of processors of the parent class. Processors
            declared here shadow inherited processors of the same name.

    Returns:
        A ProcessorList in application order.
    """
    processors = {
        name: Processor(name, options)
        for name, options in normalize_declaration(declaration).items()
    }

    for proc in inherited or ():
        if proc.name not in processors:
            proc = proc.clone()
            proc.inherited = True
            processors[proc.name] = proc

    return sort(processors)


def sort(processors: Dict[str, Processor]) -> ProcessorList:
    """
    Topologically sort a mapping of processors.

    Ties are broken by placing inherited processors first and then by name.
    """
    state = SortState(processors)

    for proc in processors.values():
        for target in proc.before or ():
            if target not in processors:
                raise UnresolvedOrderingTarget(proc.name, target, "before")
            state.afters.setdefault(target, []).append(proc.name)

    for proc in sorted(processors.values(), key=Processor.sort_key):
        proc.sort(state)

    return state.sorted
