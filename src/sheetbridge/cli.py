"""Command-line interface for SheetBridge."""

import argparse
import sys

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="SheetBridge - Google Sheets editing backend"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Credentials check command
    subparsers.add_parser(
        "check", help="Verify Google Sheets credentials and list the spreadsheet's tabs"
    )

    args = parser.parse_args()

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "check":
        run_check()
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "sheetbridge.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level.lower(),
    )


def run_check():
    """Build the Sheets session and list tabs of the configured spreadsheet."""
    from .errors import SheetBridgeError
    from .sheets import SheetMutationEngine

    if not settings.spreadsheet_id:
        print("SPREADSHEET_ID is not set.")
        sys.exit(1)

    print(f"Checking access to spreadsheet {settings.spreadsheet_id}...")
    try:
        tabs = SheetMutationEngine().list_tabs()
    except SheetBridgeError as e:
        print(f"Check failed: {e}")
        sys.exit(1)

    print(f"Found {len(tabs)} sheet(s):")
    for tab in tabs:
        print(f"  [{tab.id}] {tab.title}")


if __name__ == "__main__":
    main()
