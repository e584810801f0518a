"""
Core data structures and algorithms for binary embeddings.

The vocabulary and vector store are built once by the loaders and then only
read by the similarity, top-k and evaluation code.
"""
