"""
Run the Agri Marketplace wishlist CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    login      Sign in with a bearer token (merges the guest wishlist)
    logout     Clear stored credentials
    whoami     Show the current identity and sync state
    sync       Retry a pending guest wishlist merge
    wishlist   list | add | remove | clear

Examples:
    python run_cli.py wishlist add --item-id 42 --type FarmProduct --name "Maize"
    python run_cli.py login --token <jwt>
    python run_cli.py wishlist list

Environment variables (all optional):
    API_BASE_URL        Marketplace API URL (default: http://localhost:8000)
    AGRI_MARKET_HOME    Folder for the guest wishlist and session (default: ~/.agri-market)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
