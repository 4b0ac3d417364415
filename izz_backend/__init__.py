"""
Backend package for the izz dashboard API.

This package provides a FastAPI application that fronts Firebase
Authentication and Cloud Firestore, with in-memory stand-ins for both so
the service can run and be tested without cloud credentials.
"""
