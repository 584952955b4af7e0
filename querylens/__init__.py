"""
QueryLens - Explore an unknown database

Loads a SQLite database, snapshots its schema, and answers either
direct SQL or plain-English requests translated by a rule-based engine.
"""

__version__ = "1.0.0"
__author__ = "QueryLens Team"

from querylens.config import QueryLensConfig
from querylens.core.schema_model import SchemaModel
from querylens.translator.engine import LocalTranslator

__all__ = ["QueryLensConfig", "SchemaModel", "LocalTranslator", "__version__"]
