from .materializer import TreeMaterializer, to_tree_node

__all__ = ["TreeMaterializer", "to_tree_node"]
