__all__ = [
    "MetaCompError",
    "ConfigurationError",
    "CircularProcessorDependency",
    "UnresolvedOrderingTarget",
    "DuplicateMixinIdCollision",
    "MissingApplier",
    "UnknownDeclaration",
    "ClassAlreadyCompleted",
    "UndeclaredChain",
]


class MetaCompError(Exception):
    """
    Base class for all errors raised by metacomp.
    """


class ConfigurationError(MetaCompError, TypeError):
    """
    A class declaration cannot be applied.

    These errors are raised at class definition or first instantiation and
    leave the class unusable.
    """


class CircularProcessorDependency(ConfigurationError):
    """
    Processor ordering constraints form a cycle.
    """

    def __init__(self, path):
        self.path = tuple(path)
        super().__init__(f"circular processor dependencies: {' --> '.join(path)}")


class UnresolvedOrderingTarget(ConfigurationError):
    """
    An "after" or "before" constraint names an unknown processor.
    """

    def __init__(self, processor, target, kind="before"):
        self.processor = processor
        self.target = target
        self.kind = kind
        super().__init__(
            f'no processor matches {kind}="{target}" on {processor}'
        )


class DuplicateMixinIdCollision(ConfigurationError):
    """
    Two different mixins were applied under the same id.
    """

    def __init__(self, host, mixin_id, current, new):
        self.mixin_id = mixin_id
        super().__init__(
            f"mixin id {mixin_id!r} of {host.__name__} is already bound to "
            f"{current.__name__}, cannot bind it to {new.__name__}"
        )


class MissingApplier(ConfigurationError):
    """
    A processor has no "apply_<name>" method on the class.
    """


class UnknownDeclaration(ConfigurationError):
    """
    A declaration key does not correspond to any processor.
    """


class ClassAlreadyCompleted(ConfigurationError):
    """
    Declarations cannot be added after the class was completed.
    """


class UndeclaredChain(MetaCompError, LookupError):
    """
    A chain was invoked by a name that was never declared as a chain.
    """
