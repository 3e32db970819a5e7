"""
Composable classes: inheritable method chains, ordered class processors and
mixins applied by a metaclass.
"""
from .base import Base, ComposableMeta
from .chains import ChainSpec
from .config import Config
from .decorators import define, mixin_id, junction, lazy, merge
from .exceptions import *
from .logging import log
from .meta import ClassMeta, get_meta
from .mixins import MixinRecord, MixinTable, apply_mixins
from .processor import Processor, decode

__version__ = "0.1.0"
