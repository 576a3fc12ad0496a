"""
Utility functions used by the transaction model.
"""
