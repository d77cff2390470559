"""Chunked coverage package."""

from .chunker import chunk_label, chunk_selection, top_level_module
from .models import Chunk, ChunkPlan

__all__ = ["Chunk", "ChunkPlan", "chunk_label", "chunk_selection", "top_level_module"]
