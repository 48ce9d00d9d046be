from .engine import MutationEngine

__all__ = ["MutationEngine"]
