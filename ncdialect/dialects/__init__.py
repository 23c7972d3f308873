"""
Target dialect emitters.
"""

from .base import DialectEmitter
from .conversational import ConversationalEmitter
from .numeric_block import NumericBlockEmitter

__all__ = ["DialectEmitter", "ConversationalEmitter", "NumericBlockEmitter"]
