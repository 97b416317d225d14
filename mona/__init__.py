"""
Mona - client board core.

Entity tree, aggregation views, mutation protocol and persistence for the
client/meeting/deliverable/task board.
"""

__version__ = "0.4.0"
