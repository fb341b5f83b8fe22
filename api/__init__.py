"""
Module 09D - Minimal API (FastAPI)

HTTP API for the swarm verifier:
- POST /verify - Challenge a swarm and score it
- GET /result/{verification_id} - Stored verification
- GET /stats - Aggregate counts
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
