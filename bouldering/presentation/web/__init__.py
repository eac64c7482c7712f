"""
Web presentation layer for the bouldering backend.

Architectural Intent:
- Exposes the tweet deletion API and the Cloud Tasks worker endpoint
- Uses Python stdlib only (http.server + asyncio)
"""
