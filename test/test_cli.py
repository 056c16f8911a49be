"""
Tests for the command line entry point.
"""

import unittest
import functools
import io
import json
import os
import sys
import tempfile
from unittest.mock import Mock, patch

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli import BenchmarkCLI
from common.worker_pool import WorkerPool
from databases.base import DatabaseError

FastWorkerPool = functools.partial(WorkerPool, iteration_sleep=0, report_interval=0.01)


class TestBenchmarkCLI(unittest.TestCase):
    """Test argument handling, exit codes and printed output."""

    def setUp(self):
        self.out = io.StringIO()
        self.cli = BenchmarkCLI(out=self.out)
        patcher = patch('cli.WorkerPool', FastWorkerPool)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write_workload(self, workload):
        path = os.path.join(self.tmpdir.name, "workload.json")
        with open(path, "w") as f:
            json.dump({"Workload": workload}, f)
        return path

    def test_no_command(self):
        with patch('sys.stdout', new_callable=io.StringIO):
            self.assertEqual(self.cli.run([]), 1)

    def test_load_memory(self):
        exit_code = self.cli.run(['load', '--docs', '20', '--workers', '2', '--size', '64'])
        self.assertEqual(exit_code, 0)

        text = self.out.getvalue()
        self.assertTrue(text.startswith("Benchmark started:\n"))
        self.assertIn("Create latency:", text)
        self.assertNotIn("Read latency:", text)
        self.assertIn("Time elapsed:", text)

    def test_run_workload_file(self):
        path = self.write_workload({"Operations": 10, "CreatePercentage": 50, "ReadPercentage": 50})
        exit_code = self.cli.run(['run', '--config', path, '--database', 'memory'])
        self.assertEqual(exit_code, 0)

        text = self.out.getvalue()
        self.assertIn("Create latency:", text)
        self.assertIn("Read latency:", text)

    def test_run_overrides(self):
        path = self.write_workload({"Operations": 10, "CreatePercentage": 100, "Workers": 1})
        args = self.cli.parser.parse_args(
            ['run', '--config', path, '--workers', '3', '--operations', '50', '--workload', 'hotspot']
        )
        config = self.cli.build_run_config(args)
        self.assertEqual(config.workers, 3)
        self.assertEqual(config.operations, 50)
        self.assertEqual(config.workload, "hotspot")
        self.assertEqual(config.create_percentage, 100)

    def test_load_config(self):
        args = self.cli.parser.parse_args(['load', '--docs', '500', '--size', '2048'])
        config = self.cli.build_load_config(args)
        self.assertEqual(config.operations, 500)
        self.assertEqual(config.value_size, 2048)
        self.assertEqual(config.create_percentage, 100)
        self.assertEqual(config.read_percentage, 0)

    def test_invalid_workload(self):
        """Reads without any records are rejected before the run starts."""
        path = self.write_workload({"Operations": 10, "ReadPercentage": 100})
        self.assertEqual(self.cli.run(['run', '--config', path]), 2)
        self.assertEqual(self.out.getvalue(), "")

    def test_wrongly_typed_workload(self):
        path = self.write_workload({"Operations": "10", "CreatePercentage": 100})
        self.assertEqual(self.cli.run(['run', '--config', path]), 2)
        self.assertEqual(self.out.getvalue(), "")

    def test_interrupted_run(self):
        """A run stopped with Ctrl-C prints the partial summary and exits with 1."""
        with patch('common.worker_pool.wait', side_effect=KeyboardInterrupt):
            exit_code = self.cli.run(['load', '--docs', '1000000'])
        self.assertEqual(exit_code, 1)
        self.assertIn("Time elapsed:", self.out.getvalue())

    def test_unknown_workload_type(self):
        path = self.write_workload({"Operations": 10, "CreatePercentage": 100, "Type": "zipfian"})
        self.assertEqual(self.cli.run(['run', '--config', path]), 2)

    def test_missing_workload_file(self):
        missing = os.path.join(self.tmpdir.name, "missing.json")
        self.assertEqual(self.cli.run(['run', '--config', missing]), 2)

    def test_database_initialization_failure(self):
        database = Mock()
        database.connect.side_effect = DatabaseError("connection refused")
        with patch('cli.create_database', return_value=database):
            with self.assertLogs('cli', level='CRITICAL'):
                exit_code = self.cli.run(['load', '--database', 'couchdb', '--docs', '5'])
        self.assertEqual(exit_code, 1)
        self.assertEqual(self.out.getvalue(), "")

    def test_database_closed_after_run(self):
        database = Mock()
        with patch('cli.create_database', return_value=database):
            self.assertEqual(self.cli.run(['load', '--docs', '3']), 0)
        database.connect.assert_called_once()
        database.create.assert_called()
        database.close.assert_called_once()


if __name__ == '__main__':
    unittest.main()
