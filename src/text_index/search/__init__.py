"""
Inverted index package.

This package provides the pure-Python indexing stack:
- vocabulary: Stop word sets and stem tables
- analyzers: Whitespace tokenizer and filters (punctuation, case-fold, stop, conflation)
- storage: In-memory document store
- inverted_index: Immutable token -> posting set mapping
- indexer: Index construction
- query: Single-keyword, OR and phrase queries
- document_source: JSON / JSON Lines / CSV document loaders
"""
