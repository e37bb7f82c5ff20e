#!/usr/bin/env python3
"""
Account Service Entry Point

Starts the FastAPI server with settings from ACCOUNT_SERVICE_* environment
variables (or .env).
"""

import sys

from account_service.api import run_server


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Account Service...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
