"""Dataset access for gpkern."""

from .features import Dataset, Features, column_values, feature_matrix, get_features

__all__ = ["Dataset", "Features", "column_values", "feature_matrix", "get_features"]
