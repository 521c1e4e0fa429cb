#!/usr/bin/env python3
"""
Run the CCB form-response proxy.

Reads configuration from the environment (and .env), e.g.:
  CCB_API_URL=https://yourchurch.ccbchurch.com CCB_USERNAME=... CCB_PASSWORD=...
  API_USERNAME=... API_PASSWORD=... python scripts/run_api.py --port 8080

Use --mock to run against canned CCB responses.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from dotenv import load_dotenv


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the CCB form-response proxy")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--mock", action="store_true", help="Use the mock CCB client")
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    load_dotenv()
    if args.mock:
        os.environ["INTEGRATIONS_MODE"] = "mock"

    uvicorn.run(
        "ccb_proxy.api.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
