"""
Command-line interface for Shop Insights operations.

Runs the API server, prepares the database, seeds demo data and triggers
tenant syncs outside the HTTP surface.
"""

import argparse
import asyncio
import json
import sys

from shop_insights.utils.logger import get_logger, setup_logging
from shop_insights.utils.config import get_config, describe_configuration
from shop_insights.database.connection import Database
from shop_insights.database.models import SyncTrigger


cli_logger = get_logger(__name__)


class ShopInsightsCLI:
    """Command-line interface for Shop Insights operations."""

    def __init__(self):
        self.config = None
        self.database = None

    def _init_database(self) -> Database:
        """Open the configured database (lazy loading)."""
        if self.database is None:
            self.config = get_config()
            self.database = Database(self.config.database_url, echo=self.config.database_echo)
            self.database.create_all()
        return self.database

    def close(self):
        if self.database is not None:
            self.database.dispose()
            self.database = None

    async def cmd_serve(self, args) -> int:
        """Run the HTTP API with uvicorn."""
        import uvicorn

        config = get_config()
        host = args.host or config.api_host
        port = args.port or config.api_port

        print(f"🚀 Starting Shop Insights API on http://{host}:{port}")
        server = uvicorn.Server(uvicorn.Config(
            "shop_insights.api.main:app",
            host=host,
            port=port,
            log_level=config.log_level.lower(),
        ))
        await server.serve()
        return 0

    async def cmd_init_db(self, args) -> int:
        """Create all tables."""
        try:
            self._init_database()
            print("✅ Database tables created")
            return 0
        except Exception as e:
            cli_logger.error(f"Database initialization failed: {e}")
            print(f"❌ Database initialization failed: {e}")
            return 1

    async def cmd_sync(self, args) -> int:
        """Handle sync operations."""
        from shop_insights.services.sync_service import SyncService
        from shop_insights.services.scheduler import run_sync_cycle

        try:
            service = SyncService(self._init_database())

            if args.all:
                print("🔄 Syncing all tenants...")
                results = await run_sync_cycle(service, trigger=SyncTrigger.CLI)
            else:
                print(f"🔄 Syncing tenant {args.tenant_id}...")
                results = [await service.sync_tenant(args.tenant_id, trigger=SyncTrigger.CLI)]

            exit_code = 0
            for result in results:
                report = result.report
                if result.fetched:
                    print(
                        f"✅ Tenant {result.tenant_id}: "
                        f"{report.products.succeeded} products, "
                        f"{report.customers.succeeded} customers, "
                        f"{report.orders.succeeded} orders "
                        f"({result.duration_ms}ms)"
                    )
                    if report.total_failed:
                        print(f"⚠️  Records failed: {report.total_failed}")
                        if args.verbose:
                            for failure in report.failures:
                                print(f"   • {failure.entity} {failure.external_id}: {failure.reason}")
                else:
                    print(f"❌ Tenant {result.tenant_id}: {report.skip_reason}")
                    exit_code = 1
            return exit_code

        except Exception as e:
            cli_logger.error(f"Sync command failed: {e}")
            print(f"❌ Sync operation failed: {e}")
            return 1

    async def cmd_seed(self, args) -> int:
        """Insert the demo tenants and their data."""
        from shop_insights.database.seed import seed_demo_data

        try:
            with self._init_database().session() as db:
                reports = seed_demo_data(db)

            for report in reports:
                print(f"🌱 Tenant {report.tenant_id}: {report.total_succeeded} records")
            print("✅ Seed data inserted")
            return 0
        except Exception as e:
            cli_logger.error(f"Seeding failed: {e}")
            print(f"❌ Seeding failed: {e}")
            return 1

    async def cmd_config(self, args) -> int:
        """Handle configuration commands."""
        result = describe_configuration()
        if not result["valid"]:
            print(f"❌ Configuration is invalid: {result['error']}")
            return 1

        if args.config_action == "validate":
            print("✅ Configuration is valid")
        print("📋 Current configuration:")
        print(json.dumps(result["summary"], indent=2, default=str))
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="shop-insights",
        description="Shop Insights CLI - server, database and sync operations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shop-insights serve                   # Run the HTTP API
  shop-insights init-db                 # Create database tables
  shop-insights seed                    # Insert demo tenants
  shop-insights sync --tenant-id 1      # Sync one tenant
  shop-insights sync --all              # Sync every tenant
  shop-insights config show             # Show configuration
        """
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: API_PORT)")

    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser("seed", help="Insert demo tenants and data")

    sync_parser = subparsers.add_parser("sync", help="Data synchronization")
    target = sync_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--tenant-id", type=int, help="Tenant to sync")
    target.add_argument("--all", action="store_true", help="Sync every tenant")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "config_action",
        choices=["show", "validate"],
        help="Configuration action to perform"
    )

    return parser


async def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging()

    if not args.command:
        parser.print_help()
        return 1

    cli = ShopInsightsCLI()
    handlers = {
        "serve": cli.cmd_serve,
        "init-db": cli.cmd_init_db,
        "sync": cli.cmd_sync,
        "seed": cli.cmd_seed,
        "config": cli.cmd_config,
    }

    try:
        return await handlers[args.command](args)
    except KeyboardInterrupt:
        print("\n⏹️  Operation cancelled by user")
        return 130
    except Exception as e:
        cli_logger.error(f"CLI operation failed: {e}", exc_info=True)
        print(f"❌ Operation failed: {e}")
        return 1
    finally:
        cli.close()


def cli_entry_point():
    """Entry point for console script."""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\n⏹️  Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli_entry_point()
