"""
Row element codec: one flat column -> scalar mapping as one XML element.

Each column becomes an attribute of the row element. NULL columns are left
out so the database applies its own default on import. Binary values are
written as base64; the database adapters decode them again for columns
declared as binary.
"""

import base64
import binascii
import datetime

from typing import Any, Dict, Iterable, Mapping, Optional

from lxml import etree

from ..constants import ROW_ELEMENT


class RowCodec:
    """Converts row mappings to row elements and row attributes back to mappings."""

    def __init__(self, tag: str = ROW_ELEMENT):
        self.tag = tag

    @staticmethod
    def render_value(value: Any) -> Optional[str]:
        """
        Render a column value as attribute text.

        Args:
            value: Scalar read from the database

        Returns:
            Text for the attribute, or None when the column should be omitted
        """
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray, memoryview)):
            return base64.b64encode(bytes(value)).decode('ascii')
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()
        return str(value)

    @staticmethod
    def decode_bytes(text: str) -> bytes:
        """
        Read back a binary value written by ``render_value``.

        Raises:
            ValueError: If the text is not valid base64
        """
        try:
            return base64.b64decode(text, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 value for a binary column: {e}")

    def to_element(self, row: Mapping[str, Any]) -> etree._Element:
        """Build the row element for one row mapping."""
        element = etree.Element(self.tag)
        for column, value in row.items():
            text = self.render_value(value)
            if text is not None:
                element.set(column, text)
        return element

    def from_attributes(self, attributes: Mapping[str, str]) -> Dict[str, str]:
        """Read one row mapping from the attributes of a row element."""
        return {str(name): value for name, value in attributes.items()}


def decode_binary_columns(row: Mapping[str, Any], binary_columns: Iterable[str]) -> Dict[str, Any]:
    """
    Copy of ``row`` with the text of binary columns decoded back to bytes.

    Raises:
        ValueError: If a binary column holds text that is not valid base64
    """
    binary_columns = frozenset(binary_columns)
    return {
        column: RowCodec.decode_bytes(value) if column in binary_columns and isinstance(value, str) else value
        for column, value in row.items()
    }
