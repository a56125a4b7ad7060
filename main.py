"""
Welp - Web Server Entry Point
=============================

Run this to start the reputation API:
    python main.py

Then open http://127.0.0.1:8000/docs in your browser.

To recompute cached customer aggregates:
    python recompute_profiles.py
"""

import sys
from pathlib import Path

import uvicorn

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))


def main():
    """Start the web server."""
    print("\n" + "=" * 50)
    print("   Welp - Customer Reputation API")
    print("=" * 50)
    print("\n   Starting server at http://127.0.0.1:8000")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "src.web.app:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )


if __name__ == "__main__":
    main()
