"""Providers package for chunkwright - concrete strategy and embedding implementations."""
