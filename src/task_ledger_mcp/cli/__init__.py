"""CLI interface for Task Ledger (optional [cli] extra)."""

import sys


def main() -> None:
    """Entry point for the ledger CLI."""
    try:
        from task_ledger_mcp.cli.app import create_app

        app = create_app()
        app()
    except ImportError as e:
        if "typer" in str(e).lower() or "rich" in str(e).lower():
            print("CLI requires typer and rich. Install with: pip install task-ledger-mcp[cli]")
            sys.exit(1)
        raise


if __name__ == "__main__":
    main()
