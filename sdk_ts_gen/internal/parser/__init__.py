from .openapi import load_document, read_source
from .schema_graph import SchemaGraph

__all__ = ["SchemaGraph", "load_document", "read_source"]
