"""
TilePaint - editing engine for a layered 2D tile-map level editor.
"""

from .core.document import Document, Layer, EMPTY
from .core.editor import MapEditor

__version__ = '1.0.0'
__all__ = [
    'Document',
    'Layer',
    'EMPTY',
    'MapEditor',
]
