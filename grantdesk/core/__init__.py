"""Core utilities and shared application primitives.

Configuration, the HTTP transport factory, error types, request middleware
and input validation for the console API.
"""
