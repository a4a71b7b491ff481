"""
Aspirant Network client - session, exam context and API access for exam aspirants.

This package provides the client-side session layer, route guards, optimistic
page state and a typed client for the Aspirant Network REST API.
"""

__version__ = "1.0.0"
__author__ = "Development Team"
__email__ = "dev@example.com"
