#!/usr/bin/env python3
"""
Storefront Backend Runner
=========================

Usage:
    python run_app.py                    # Development server with auto-reload
    python run_app.py --mode prod        # Production mode
    python run_app.py --init             # Create tables and seed data first
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import asyncio
import os
import sys


def check_environment():
    """Check if environment is properly set up"""
    if os.path.exists(".env"):
        print(".env file found")
    else:
        print(".env file not found, using environment variables")

    if not os.environ.get("SECRET_KEY") and not os.path.exists(".env"):
        print("SECRET_KEY is not set. Copy .env.example to .env and fill it in.")
        return False

    return True


def run_initial_data():
    """Create tables, the gift popup config and default templates"""
    from storefront.initial_data import main as init_main

    asyncio.run(init_main())


def run_main_app(host="0.0.0.0", port=8000, reload=True, workers=1):
    """Run the FastAPI application"""
    print(f"\nStarting Storefront API on {host}:{port}")
    print(f"API Docs: http://localhost:{port}/api/docs")

    import uvicorn
    uvicorn.run(
        "storefront.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_level="info"
    )


def main():
    parser = argparse.ArgumentParser(
        description="Storefront Backend Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Worker processes in prod mode (default: 4)"
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload"
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Run the initialisation step before starting"
    )

    args = parser.parse_args()

    if not check_environment():
        return 1

    if args.init:
        run_initial_data()

    reload = not args.no_reload and args.mode != "prod"
    run_main_app(args.host, args.port, reload, args.workers)

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        sys.exit(0)
