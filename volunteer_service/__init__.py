"""
Backend package for the volunteer coordination API.

Provides a FastAPI application that manages volunteer tasks ("todos") and
user accounts on top of MongoDB.
"""
