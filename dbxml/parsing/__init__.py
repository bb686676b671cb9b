"""
XML reading side of the converter: the row codec and the streaming import handler.
"""

from .row_codec import RowCodec
from .import_handler import ImportHandler, ImportState

__all__ = ["RowCodec", "ImportHandler", "ImportState"]
