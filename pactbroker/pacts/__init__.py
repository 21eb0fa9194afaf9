"""Pact version resolution and deduplication.

Content hashing, structural diffing, version-order queries, the
content-addressed pact version store, and the publication resolver that
composes them.
"""
