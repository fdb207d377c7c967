# src/comment_pulse/app/__init__.py
"""
Application Package
Configuration, database and dependency wiring
"""
