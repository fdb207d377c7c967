# src/comment_pulse/infrastructure/__init__.py
"""
Infrastructure Package
External service clients and persistence
"""
