"""
Clueboard - Trivia board authoring and play engine.

Boards live in a small line-oriented text format. The package provides:
- A permissive grammar for game and draft files
- Classification and play validation of uploaded text
- A deterministic serializer for game and draft files
- A durable session store with startup reconciliation
"""

__version__ = "0.1.0"
