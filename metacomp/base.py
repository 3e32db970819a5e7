from types import SimpleNamespace
from typing import Type

from .logging import log
from .meta import ClassMeta, define_method, get_meta
from .mixins import apply_mixins_method


class ComposableMeta(type):
    """
    Metaclass for all composable types.

    The optional inner "Meta" class of the class body is removed from the
    namespace and its public attributes are passed to ClassMeta.define().
    """

    def __new__(mcs, name, bases, ns):
        if "Meta" in ns:
            ns = dict(ns)
            del ns["Meta"]
        return super().__new__(mcs, name, bases, ns)

    def __init__(cls, name, bases, ns):
        super().__init__(name, bases, ns)

        # Create _meta object
        cls: Type["Base"]
        meta_ns = ns.get("Meta", SimpleNamespace)()
        meta = cls._meta_class().adopt(cls)
        meta.define(cls._meta_args(meta_ns))
        cls._meta_finalize()
        log.info(f"Class created: {meta.fullname}")


class Base(metaclass=ComposableMeta):
    """
    Base class for composable objects.

    Instances run the "ctor" chain when constructed and the "dtor" chain, in
    reverse order, when destroyed.
    """

    _meta: ClassMeta

    class Meta:
        chains = ["ctor", "dtor"]

        # The "processors" and "mixin_id" declarations are not processors:
        # they are handled as soon as they are declared.
        processors = {
            "properties": None,
            "prototype": "properties",
            "static": "prototype",
            "chains": "static",
            "mixins": "chains",
            "config": "mixins",
        }
        properties = {
            "is_instance": {"value": True},
            "configuring": {"value": False, "writable": True},
            "constructing": {"value": True, "writable": True},
            "destroying": {"value": False, "writable": True},
            "destroyed": {"value": False, "writable": True},
        }
        static = {"is_class": True}

    def __init__(self, *args, **kwargs):
        cls = type(self)
        meta = self._meta
        if meta.type is not cls:
            meta = get_meta(cls)
        meta.new_instance()
        self.construct(*args, **kwargs)

    #
    # Meta hooks
    #
    @classmethod
    def _meta_class(cls):
        """
        Allow to override the class used to construct the _meta attribute.
        """
        return ClassMeta

    @classmethod
    def _meta_args(cls, meta_obj) -> dict:
        """
        Receives an instance of the Meta object declared in the class body and
        returns the declaration passed to ClassMeta.define().
        """
        return {
            attr: getattr(meta_obj, attr)
            for attr in dir(meta_obj)
            if not attr.startswith("_")
        }

    @classmethod
    def _meta_finalize(cls):
        """
        Executed after the class is created and populated with the _meta
        attribute.

        The default implementation is a no-op, but can be overriden by
        subclasses.
        """

    #
    # Life cycle
    #
    def construct(self, config=None, **kwargs):
        meta = self._meta
        if kwargs:
            config = {**(config or {}), **kwargs}

        if config or meta.configs:
            self.configuring = True
            self.configure(config)
            self.configuring = False

        if meta.live_chains.get("ctor"):
            meta.call_chain(self, "ctor")
        self.constructing = False

    def configure(self, config=None):
        """
        Apply the initial configuration. Only the first call has any effect,
        use reconfigure() to change a live object.
        """
        if self.__dict__.get("_configured"):
            return
        self._configured = True
        self._meta.configure(self, config)

    def reconfigure(self, config=None, **kwargs):
        if kwargs:
            config = {**(config or {}), **kwargs}
        self.configuring = True
        try:
            self._meta.reconfigure(self, config)
        finally:
            self.configuring = False

    def destroy(self):
        if self.destroying or self.destroyed:
            return
        self.destroying = True
        self.destruct()
        self.destroyed = True

    def destruct(self):
        meta = self._meta
        if meta.live_chains.get("dtor"):
            meta.call_chain(self, "dtor", reverse=True)

    def call_chain(self, method, *args):
        self._meta.call_chain(self, method, args)

    def call_chain_rev(self, method, *args):
        self._meta.call_chain(self, method, args, reverse=True)

    def call_junction(self, owner, method, *args) -> list:
        """
        Call the implementations of method that precede owner in the class
        hierarchy, including mixins, and return their results.

        This is meant to be called from methods decorated with @junction.
        """
        supers = self._meta.junction_supers(owner, method)
        return [impl.bind(self)(*args) for impl in supers]

    #
    # Class API
    #
    @classmethod
    def get_meta(cls) -> ClassMeta:
        return get_meta(cls)

    define = classmethod(define_method)

    #
    # Processors
    #
    @classmethod
    def apply_properties(cls, properties):
        cls.get_meta().add_properties(properties)

    @classmethod
    def apply_prototype(cls, members):
        cls.get_meta().add_prototype(members)

    @classmethod
    def apply_static(cls, members):
        cls.get_meta().add_static(members)

    @classmethod
    def apply_chains(cls, chains):
        cls.get_meta().register_chains(chains)

    apply_mixins = classmethod(apply_mixins_method)

    @classmethod
    def apply_config(cls, configs):
        cls.get_meta().add_configs(configs)
