"""State/store layer.

The selection store is the only component allowed to mutate a driver's
ZIP assignments; the document store is the persistence boundary behind it.
"""
