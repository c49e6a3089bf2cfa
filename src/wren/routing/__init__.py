"""Routing — a route table compiled into an immutable path trie.

Routes are registered during ``Application.init()`` in caller order,
followed by the unconditional not-found catch-all.
"""
