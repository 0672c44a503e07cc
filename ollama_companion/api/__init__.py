"""
Local HTTP API exposing the chat session to UI collaborators.
"""
