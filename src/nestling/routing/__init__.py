"""Routing — the router handle that receives the assembled route tree.

The nested route tree is flattened into records and compiled into a trie
with O(path-depth) matching.
"""
