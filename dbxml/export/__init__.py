"""
XML writing side of the converter.
"""

from .xml_exporter import XMLExporter

__all__ = ["XMLExporter"]
