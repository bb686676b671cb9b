"""
Element and attribute names shared by the exporter and the import handler.

These names define the document format; an exporter and an importer only
interoperate when they agree on them.
"""

TABLE_ELEMENT = "table"
TABLE_NAME_ATTRIBUTE = "table_name"
ROW_ELEMENT = "row"

# Internal tables never picked up by table discovery (compared lowercased)
RESERVED_TABLES = frozenset({"android_metadata", "sqlite_sequence"})
