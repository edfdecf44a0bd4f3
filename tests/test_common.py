# tests/test_common.py - process helper and elevation broker tests.
import sys
import unittest
import logging

from tests import *

from boot_selector.errors import BootConfigError, ToolLaunchFailure, ToolNonZeroExit, ToolTimeout
from boot_selector.platforms.common import (
    CommandBroker, ElevationBroker, NullBroker, make_broker, run, spawn
)

log = logging.getLogger()

NO_SUCH_TOOL = "boot-selector-no-such-tool"


class RunTests(unittest.TestCase):
    def setUp(self):
        log.info("Preparing %s", self._testMethodName)

    def tearDown(self):
        log.info("Tearing down %s", self._testMethodName)

    def test_run_captures_output(self):
        cp = run([sys.executable, "-c", "import sys; print('Boot0000* A'); print('oops', file=sys.stderr)"])
        self.assertEqual(cp.returncode, 0)
        self.assertEqual(cp.stdout.strip(), "Boot0000* A")
        self.assertEqual(cp.stderr.strip(), "oops")

    def test_run_missing_tool(self):
        with self.assertRaises(ToolLaunchFailure) as cm:
            run([NO_SUCH_TOOL])
        self.assertEqual(cm.exception.argv, [NO_SUCH_TOOL])
        self.assertIn(NO_SUCH_TOOL, str(cm.exception))

    def test_run_nonzero_exit_unchecked(self):
        cp = run([sys.executable, "-c", "import sys; sys.exit(3)"])
        self.assertEqual(cp.returncode, 3)

    def test_run_nonzero_exit_checked(self):
        code = "import sys; sys.stderr.write('Access is denied.'); sys.exit(1)"
        with self.assertRaises(ToolNonZeroExit) as cm:
            run([sys.executable, "-c", code], check=True)
        self.assertEqual(cm.exception.returncode, 1)
        self.assertEqual(cm.exception.stderr, "Access is denied.")

    def test_run_replaces_undecodable_output(self):
        code = ("import sys; sys.stdout.buffer.write(b'Boot0000* caf\\xe9 OS\\n'); "
                "sys.stderr.buffer.write(b'fehl\\xfcr\\n'); sys.exit(1)")
        cp = run([sys.executable, "-c", code])
        self.assertEqual(cp.returncode, 1)
        self.assertTrue(cp.stdout.startswith("Boot0000* caf"))
        self.assertTrue(cp.stderr.startswith("fehl"))

    def test_run_checked_undecodable_stderr(self):
        code = "import sys; sys.stderr.buffer.write(b'fehl\\xfcr'); sys.exit(1)"
        with self.assertRaises(ToolNonZeroExit) as cm:
            run([sys.executable, "-c", code], check=True)
        self.assertIn("fehl", cm.exception.stderr)

    def test_run_timeout(self):
        with self.assertRaises(ToolTimeout) as cm:
            run([sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.2)
        self.assertEqual(cm.exception.timeout, 0.2)

    def test_spawn_missing_tool(self):
        with self.assertRaises(ToolLaunchFailure):
            spawn([NO_SUCH_TOOL, "/r", "/t", "0"])

    def test_spawn_does_not_wait(self):
        proc = spawn([sys.executable, "-c", "pass"])
        self.assertEqual(proc.wait(timeout=30), 0)


class BrokerTests(unittest.TestCase):
    def test_null_broker(self):
        self.assertEqual(NullBroker().wrap(["efibootmgr"]), ["efibootmgr"])

    def test_command_broker(self):
        broker = CommandBroker(["pkexec"])
        self.assertEqual(broker.name, "pkexec")
        self.assertEqual(broker.wrap(["sh", "-c", "true"]), ["pkexec", "sh", "-c", "true"])

    def test_make_broker(self):
        self.assertIsInstance(make_broker("none"), NullBroker)
        self.assertIsInstance(make_broker(None), NullBroker)
        self.assertEqual(make_broker("sudo").wrap(["x"]), ["sudo", "-n", "x"])
        self.assertEqual(make_broker("pkexec").wrap(["x"]), ["pkexec", "x"])

    def test_make_broker_unknown_is_config_error(self):
        with self.assertRaises(BootConfigError) as cm:
            make_broker("doas")
        self.assertIn("doas", str(cm.exception))

    def test_broker_base_is_abstract(self):
        with self.assertRaises(TypeError):
            ElevationBroker()
