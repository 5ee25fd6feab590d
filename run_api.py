"""
Run the Agri Marketplace profiles REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    DB_PATH             SQLite database file path (default: marketplace.db)
    JWT_SECRET          Secret key for verifying JWT tokens (change in production!)
    JWT_ALGORITHM       JWT signing algorithm (default: HS256)
    JWT_EXPIRY_HOURS    Lifetime of tokens issued by tooling (default: 24)
    CORS_ORIGINS        Comma-separated allowed origins (default: *)
    LOG_LEVEL           Logging level (default: INFO)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
