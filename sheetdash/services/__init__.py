"""
Service layer: sheet fetch, dataset holder, messaging client and the batch dispatcher.
"""
