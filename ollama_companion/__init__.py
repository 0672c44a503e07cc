"""
Ollama Companion: a streaming chat session manager for a local Ollama server.
"""

__version__ = "1.0.0"
