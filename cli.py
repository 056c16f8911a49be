import os
import sys
import logging
import argparse
import dataclasses

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    DEFAULT_WORKERS, DEFAULT_DOCUMENTS, DEFAULT_VALUE_SIZE,
    DEFAULT_HOSTNAME, DEFAULT_DATABASE,
)
from common.database_factory import create_database, DATABASE_TYPES
from common.worker_pool import WorkerPool
from databases.base import DatabaseError
from workloads import (
    WorkloadConfig, ConfigurationError, KeyspaceEmptyError,
    WORKLOAD_TYPES, create_workload,
)

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class BenchmarkCLI:
    """Command line interface for the document store load harness."""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description='Document store load harness',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Insert 100k documents of ~1KB with 8 workers into CouchDB
  docbench load --database couchdb --hostname 10.0.0.5 --workers 8 --docs 100000 --size 1024

  # Run a mixed workload described in a JSON file
  docbench run --config configs/mixed.json --database couchdb --hostname 10.0.0.5

  # Dry run against the in-memory store
  docbench run --config configs/mixed.json --operations 500
            """
        )
        parser.add_argument('--verbose', '-v', action='store_true',
                            help='Enable debug logging')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Run command
        run_parser = subparsers.add_parser('run', help='Run a workload described in a JSON file')
        run_parser.add_argument('--config', type=str, required=True,
                                help='Path to the JSON workload file')
        run_parser.add_argument('--workers', type=int,
                                help='Number of workload threads (overrides the file)')
        run_parser.add_argument('--operations', type=int,
                                help='Total number of operations (overrides the file)')
        run_parser.add_argument('--workload', choices=sorted(WORKLOAD_TYPES),
                                help='Key access pattern (overrides the file)')
        self._add_database_arguments(run_parser)

        # Load command
        load_parser = subparsers.add_parser('load', help='Insert documents with a create-only workload')
        load_parser.add_argument('--workers', type=int, default=DEFAULT_WORKERS,
                                 help=f'Number of workload threads (default: {DEFAULT_WORKERS})')
        load_parser.add_argument('--docs', type=int, default=DEFAULT_DOCUMENTS,
                                 help=f'Number of documents to insert (default: {DEFAULT_DOCUMENTS})')
        load_parser.add_argument('--size', type=int, default=DEFAULT_VALUE_SIZE,
                                 help=f'Average size of the documents in bytes (default: {DEFAULT_VALUE_SIZE})')
        self._add_database_arguments(load_parser)

        return parser

    @staticmethod
    def _add_database_arguments(parser):
        parser.add_argument('--database', choices=DATABASE_TYPES, default=DEFAULT_DATABASE,
                            help=f'Database backend (default: {DEFAULT_DATABASE})')
        parser.add_argument('--hostname', type=str, default=DEFAULT_HOSTNAME,
                            help=f'Database server hostname (default: {DEFAULT_HOSTNAME})')
        parser.add_argument('--bucket', type=str,
                            help='Bucket for the s3 backend (default: from BUCKET_NAME)')

    def build_run_config(self, args) -> WorkloadConfig:
        """Load the workload file and apply command line overrides."""
        config = WorkloadConfig.from_file(args.config)
        overrides = {
            'workers': args.workers,
            'operations': args.operations,
            'workload': args.workload,
        }
        overrides = {name: value for name, value in overrides.items() if value is not None}
        if overrides:
            config = dataclasses.replace(config, **overrides)
        return config

    @staticmethod
    def build_load_config(args) -> WorkloadConfig:
        return WorkloadConfig(
            operations=args.docs,
            create_percentage=100,
            value_size=args.size,
            workers=args.workers,
        )

    def execute(self, config: WorkloadConfig, args) -> int:
        """Connect to the database, run the workload and print the summary."""
        try:
            config.validate()
            workload = create_workload(config.workload)
        except ConfigurationError as e:
            logger.error(f"Invalid workload configuration: {e}")
            return 2

        try:
            database = create_database(args.database, hostname=args.hostname, bucket_name=args.bucket)
            database.connect()
        except (DatabaseError, ValueError) as e:
            logger.critical(f"database initialization failed: {e}")
            return 1

        try:
            pool = WorkerPool(database, workload, config, out=self.out)
            state = pool.run()
        except KeyspaceEmptyError as e:
            logger.error(f"Run aborted: {e}")
            return 1
        finally:
            database.close()

        state.report_summary(self.out)
        if pool.interrupted:
            logger.warning(f"Run stopped early after {state.operations} of {config.operations} operations")
            return 1
        return 0

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)

        if parsed_args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            if parsed_args.command == 'run':
                logger.info("=== Workload Run ===")
                config = self.build_run_config(parsed_args)
            elif parsed_args.command == 'load':
                logger.info("=== Document Load ===")
                config = self.build_load_config(parsed_args)
            else:
                logger.error(f"Unknown command: {parsed_args.command}")
                return 1
        except ConfigurationError as e:
            logger.error(f"Invalid workload configuration: {e}")
            return 2

        try:
            return self.execute(config, parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return 1


def main():
    """Main entry point."""
    cli = BenchmarkCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
