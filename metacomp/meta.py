import weakref
from threading import RLock
from types import FunctionType, MappingProxyType
from typing import Dict, List, Optional, Type

from sidekick import lazy
from .chains import ChainSpec, Participant, build_chain, contributors, defines
from .config import Config, as_config
from .exceptions import (
    ClassAlreadyCompleted,
    MissingApplier,
    UndeclaredChain,
    UnknownDeclaration,
)
from .logging import log
from .mixins import (
    MixinRecord,
    MixinTable,
    apply_mixins,
    apply_mixins_method,
    normalize_mixins,
    plan_mixins,
)
from .processor import ProcessorList, decode, normalize_declaration
from .utils import copy, property_from_spec, to_list

#: Declaration keys whose values are merged key by key across define() calls.
MAPPING_KEYS = frozenset({"properties", "prototype", "static", "config"})

#: Declaration keys whose values are concatenated across define() calls.
SEQUENCE_KEYS = frozenset({"chains", "mixins"})


class ClassMeta:
    """
    Metadata for classes that take part in the composition engine.

    Every adopted class owns exactly one ClassMeta, stored in the _meta class
    attribute. Declarations accumulate through define() and are only applied
    when the class is completed, either before its first instance is created
    or on explicit request.
    """

    type: type
    mixin_id: Optional[str] = None
    completed: bool = False
    instances: int = 0

    @lazy
    def fullname(self):
        cls = self.type
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def super_meta(self) -> Optional["ClassMeta"]:
        return self._super_meta() if self._super_meta is not None else None

    @property
    def chain_names(self) -> frozenset:
        """
        Names of all chains visible from this class, including chains declared
        on ancestors and mixins that were not completed yet.
        """
        names = set(self._chain_names)
        names.update(to_list(self.declaration.get("chains")) or ())
        parent = self.super_meta
        if parent is not None:
            names.update(parent.chain_names)
        return frozenset(names)

    def __init__(self, cls):
        self.type = cls
        parent = find_super_meta(cls)
        self._super_meta = weakref.ref(parent) if parent is not None else None
        self._lock = RLock()
        self._completing = False

        self.declaration: dict = {}
        self.processor_declaration: Optional[dict] = None
        self.processors = ProcessorList()

        self._chain_names = set()
        self.chains: Dict[str, ChainSpec] = {}
        self._live_chains: Dict[str, bool] = {}
        self.live_chains = MappingProxyType(self._live_chains)
        self.contributors: List[type] = []

        self.mixins: Dict[str, type] = {}
        self.mixin_records: List[MixinRecord] = []
        self.configs: Dict[str, Config] = {}

    def __repr__(self):
        return f"ClassMeta({self.type.__name__})"

    @classmethod
    def adopt(cls, klass: type) -> "ClassMeta":
        """
        Attach a fresh ClassMeta to klass.

        Plain classes also receive the get_meta(), define() and apply_mixins()
        class methods when they do not define them.
        """
        meta = cls(klass)
        klass._meta = meta
        klass.mixins = MixinTable(meta)
        for name, method in ADOPTED_METHODS.items():
            if not hasattr(klass, name):
                setattr(klass, name, classmethod(method))
        return meta

    #
    # Declarations
    #
    def define(self, options=None, **kwargs) -> "ClassMeta":
        """
        Merge a declaration fragment into the pending declaration.

        Nothing is applied before the class is completed. The "processors"
        and "mixin_id" keys take effect immediately.
        """
        options = {**(options or {}), **kwargs}
        if not options:
            return self
        if self.completed:
            raise ClassAlreadyCompleted(
                f"cannot change the declaration of {self.fullname} after its "
                f"first instance was created"
            )

        declaration = self.declaration
        for key, value in options.items():
            if key == "processors":
                processors = normalize_declaration(self.processor_declaration)
                processors.update(normalize_declaration(value))
                self.processor_declaration = processors
            elif key == "mixin_id":
                self.mixin_id = value
            elif key == "mixins":
                declaration[key] = declaration.get(key, []) + normalize_mixins(value)
            elif key in SEQUENCE_KEYS:
                declaration[key] = declaration.get(key, []) + (to_list(value) or [])
            elif key in MAPPING_KEYS:
                declaration[key] = copy(dict(declaration.get(key, {})), value)
            else:
                declaration[key] = value
        return self

    def resolve_processors(self) -> ProcessorList:
        """
        Return the sorted list of processors for class.

        Classes that do not declare processors share the list of their parent.
        """
        parent = self.super_meta
        if parent is None:
            inherited = ()
        elif parent.completed:
            inherited = parent.processors
        else:
            inherited = parent.resolve_processors()

        if self.processor_declaration is None:
            return ProcessorList(inherited)
        return decode(self.processor_declaration, inherited)

    def get_processors(self) -> list:
        """
        Return the sorted processors of class.
        """
        if self.completed:
            return list(self.processors)
        return list(self.resolve_processors())

    #
    # Completion
    #
    def complete(self) -> "ClassMeta":
        """
        Apply all processors to the class. Subsequent calls do nothing.
        """
        if self.completed:
            return self
        with self._lock:
            if self.completed or self._completing:
                return self
            self._completing = True
            try:
                self._complete()
            finally:
                self._completing = False
        return self

    def _complete(self):
        cls = self.type
        parent = self.super_meta
        if parent is not None:
            parent.complete()

        processors = self.resolve_processors()
        unknown = [k for k in self.declaration if k not in processors.by_name]
        if unknown:
            names = ", ".join(map(repr, unknown))
            raise UnknownDeclaration(f"{self.fullname}: no processor for {names}")

        # Nothing is applied unless every declared processor can run
        declared = [proc for proc in processors if proc.name in self.declaration]
        for proc in declared:
            if not hasattr(cls, proc.applier):
                raise MissingApplier(
                    f"{self.fullname} must implement {proc.applier}() to apply "
                    f"the {proc.name!r} processor"
                )
        if "mixins" in self.declaration:
            plan_mixins(cls, self.declaration["mixins"])

        if parent is not None:
            self.configs = {**parent.configs, **self.configs}
        for proc in declared:
            applier = getattr(cls, proc.applier)
            log.debug(f"{self.fullname}: {proc.applier}()")
            applier(self.declaration[proc.name])

        self.processors = processors
        self.build_chains()
        self.completed = True
        log.debug(f"Class completed: {self.fullname}, processors: {processors.names()}")

    def new_instance(self):
        """
        Register a new instance, completing the class on the first one.
        """
        if not self.completed:
            self.complete()
        with self._lock:
            self.instances += 1

    #
    # Built-in processors
    #
    def add_properties(self, properties: dict):
        cls = self.type
        for name, spec in properties.items():
            setattr(cls, name, property_from_spec(spec))

    def add_prototype(self, members: dict):
        cls = self.type
        for name, value in members.items():
            setattr(cls, name, value)

    def add_static(self, members: dict):
        cls = self.type
        for name, value in members.items():
            if isinstance(value, FunctionType):
                value = staticmethod(value)
            setattr(cls, name, value)

    def register_chains(self, names):
        self._chain_names.update(to_list(names) or ())

    def add_mixins(self, mixins) -> List[MixinRecord]:
        return apply_mixins(self.type, mixins)

    def add_configs(self, configs: dict):
        cls = self.type
        for name, value in configs.items():
            inherited = self.configs.get(name)
            if isinstance(value, Config):
                cfg = value.copy() if value.owner is not None else value
            elif inherited is not None:
                cfg = inherited.copy(default=value)
            else:
                cfg = as_config(value)
            setattr(cls, name, cfg)
            cfg.__set_name__(cls, name)
            self.configs[name] = cfg

    #
    # Chains
    #
    def build_chains(self):
        """
        Resolve every chain of the class and recompute live_chains.
        """
        classes = contributors(self.type)
        self.contributors = classes
        self.chains = {name: build_chain(name, classes) for name in sorted(self.chain_names)}
        self._live_chains.clear()
        self._live_chains.update((k, bool(v)) for k, v in self.chains.items())

    def call_chain(self, instance, name: str, args=(), reverse=False):
        """
        Call all implementations of the given chain for instance.

        Ancestors run first, unless reverse=True.
        """
        try:
            chain = self.chains[name]
        except KeyError:
            raise UndeclaredChain(f"{name!r} is not a chain of {self.fullname}") from None
        if chain:
            chain.call(instance, args or (), reverse)

    def junction_supers(self, owner: type, name: str) -> List[Participant]:
        """
        Implementations of name from every contributor that precedes owner,
        in forward order.

        This is used by junction methods, which explicitly call all of their
        "super" implementations, including the ones provided by mixins.
        """
        classes = self.contributors if self.completed else contributors(self.type)
        try:
            idx = classes.index(owner)
        except ValueError:
            raise ValueError(f"{owner.__name__} does not contribute to {self.fullname}")
        return [
            Participant(klass, vars(klass)[name])
            for klass in classes[:idx]
            if defines(klass, name)
        ]

    #
    # Instance configuration
    #
    def configure(self, instance, config: Optional[dict] = None):
        """
        Initialize configuration values for a new instance.
        """
        values = dict(config or {})
        for name, cfg in self.configs.items():
            if name in values:
                setattr(instance, name, values.pop(name))
            elif not cfg.lazy and not cfg.is_set(instance):
                cfg.initialize(instance)
        for name, value in values.items():
            setattr(instance, name, value)

    def reconfigure(self, instance, config: Optional[dict] = None):
        """
        Assign configuration values to a live instance.

        Only the given values are touched. Processors never run again.
        """
        for name, value in (config or {}).items():
            setattr(instance, name, value)
        log.debug(f"{self.fullname}: reconfigured {sorted(config or ())}")


#
# Utility functions
#
def own_meta(cls: type) -> Optional[ClassMeta]:
    """
    Return the ClassMeta owned by cls, or None if it was not adopted.
    """
    meta = vars(cls).get("_meta")
    return meta if isinstance(meta, ClassMeta) else None


def find_super_meta(cls: type) -> Optional[ClassMeta]:
    for base in cls.__mro__[1:]:
        meta = own_meta(base)
        if meta is not None:
            return meta
    return None


def get_meta(cls: type) -> ClassMeta:
    """
    Return the ClassMeta of cls, adopting it if necessary.
    """
    meta = own_meta(cls)
    if meta is None:
        inherited = getattr(cls, "_meta", None)
        meta_class: Type[ClassMeta] = (
            type(inherited) if isinstance(inherited, ClassMeta) else ClassMeta
        )
        meta = meta_class.adopt(cls)
    return meta


def define_method(cls, options=None, **kwargs):
    """
    Class method form of ClassMeta.define(). Returns the class.
    """
    get_meta(cls).define(options, **kwargs)
    return cls


ADOPTED_METHODS = {
    "get_meta": get_meta,
    "define": define_method,
    "apply_mixins": apply_mixins_method,
}
