import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from oncall import config
from oncall.db import init_db


class TempDatabaseTestCase(unittest.TestCase):
    """Points the store at a fresh sqlite file for each test."""

    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp(prefix="oncall-test-"))
        self.db_file = self.tmp_dir / "oncall.sqlite"
        patcher = mock.patch.object(config, "ONCALL_DB_PATH", self.db_file)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(shutil.rmtree, self.tmp_dir, ignore_errors=True)
        init_db()
