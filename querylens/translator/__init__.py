"""Free-text to SQL translation."""

from querylens.translator.engine import LocalTranslator

__all__ = ["LocalTranslator"]
