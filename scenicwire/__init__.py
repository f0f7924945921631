"""Script store and drawing-script decoder for Scenic scenes, with the hashing and hash table beneath it."""

__version__ = "0.1.0"
__all__ = ["bits", "hashing", "hashtable", "script"]