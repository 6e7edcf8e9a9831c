#!/usr/bin/env python3
"""
TFactorTx Explorer — launch the web site.

Usage:
    python main.py                          # http://localhost:8000
    python main.py --port 9000              # http://localhost:9000
    python main.py --host 127.0.0.1         # bind to localhost only
    python main.py --data-dir /srv/tfactortx
    python main.py --data-url https://tfactortx.example/api/v1/data
    python main.py --reload                 # auto-reload on code changes
"""

from __future__ import annotations

import argparse
import os
import sys
import webbrowser
from pathlib import Path


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Launch the TFactorTx Explorer web interface.",
    )
    parser.add_argument(
        "--host", default=os.getenv("APP_HOST", "0.0.0.0"),
        help="Bind address (default: 0.0.0.0 or APP_HOST env var)",
    )
    parser.add_argument(
        "--port", type=int, default=int(os.getenv("APP_PORT", "8000")),
        help="Port to listen on (default: 8000 or APP_PORT env var)",
    )
    parser.add_argument(
        "--data-dir", type=Path, default=None,
        help="Directory with the TFactorTx CSV files (default: data or APP_DATA_DIR env var)",
    )
    parser.add_argument(
        "--data-url", default=None,
        help="Fetch the overview table from another instance's /api/v1/data "
             "(default: APP_DATA_URL env var)",
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Enable auto-reload on file changes (development mode)",
    )
    parser.add_argument(
        "--no-browser", action="store_true",
        help="Don't open a browser window automatically",
    )
    args = parser.parse_args()

    # The app reads APP_DATA_DIR at import time (also in reload workers).
    if args.data_dir is not None:
        os.environ["APP_DATA_DIR"] = str(args.data_dir)
    if args.data_url:
        os.environ["APP_DATA_URL"] = args.data_url

    data_dir = Path(os.getenv("APP_DATA_DIR", "data"))
    data_url = os.getenv("APP_DATA_URL")
    overview = data_dir / "tfactortx_overview.csv"
    if not data_url and not overview.exists():
        print(f"Warning: overview table not found at {overview}")
        print("  The database page will show an error until the file is present,")
        print("  or pass --data-dir /path/to/data")
        print()

    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is not installed.")
        print("  pip install uvicorn[standard]")
        sys.exit(1)

    url = f"http://{'localhost' if args.host == '0.0.0.0' else args.host}:{args.port}"
    print(f"Starting TFactorTx Explorer at {url}")
    print(f"Data directory: {data_dir}")
    if data_url:
        print(f"Overview table from: {data_url}")
    print()

    if not args.no_browser:
        # Open browser after a short delay to let the server start
        import threading
        threading.Timer(1.5, webbrowser.open, args=(url,)).start()

    uvicorn.run(
        "api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
