"""
Policy Service - жизненный цикл политик, утверждение через workflow и переводы.
"""

__version__ = "0.1.0"
