from __future__ import annotations

import http.client
import signal
import threading
from unittest import mock

from django.db import OperationalError
from django.test import SimpleTestCase, TestCase

from .liveness import LivenessCheck, ping_database
from .server import GracefulWSGIServer, create_server, install_shutdown_handler, serve


class PingDatabaseTests(TestCase):
    def test_ping_succeeds_against_test_database(self):
        ping_database()


class LivenessCheckTests(SimpleTestCase):
    def _check(self, **kwargs) -> LivenessCheck:
        check = LivenessCheck(max_retries=kwargs.get("max_retries", 3), retry_delay=kwargs.get("retry_delay", 5.0))
        check._schedule = mock.Mock()
        return check

    @mock.patch("core.liveness.ping_database")
    def test_success_marks_connected_without_retry(self, ping):
        check = self._check()

        with self.assertLogs("core.liveness", level="INFO") as logs:
            self.assertTrue(check.run_attempt())

        self.assertTrue(check.connected)
        self.assertEqual(check.retries, 0)
        check._schedule.assert_not_called()
        self.assertIn("Connected to", logs.output[0])

    @mock.patch("core.liveness.ping_database", side_effect=OperationalError("connection refused"))
    def test_failure_schedules_retry_at_fixed_delay(self, ping):
        check = self._check(retry_delay=2.5)

        with self.assertLogs("core.liveness", level="WARNING") as logs:
            self.assertFalse(check.run_attempt())

        self.assertEqual(check.retries, 1)
        check._schedule.assert_called_once_with(2.5)
        self.assertIn("retry 1/3", logs.output[0])

    @mock.patch("core.liveness.ping_database", side_effect=OperationalError("connection refused"))
    def test_retries_are_bounded(self, ping):
        check = self._check(max_retries=3)

        with self.assertLogs("core.liveness", level="WARNING") as logs:
            for _attempt in range(10):
                check.run_attempt()

        self.assertEqual(check.retries, 3)
        self.assertEqual(check._schedule.call_count, 3)
        self.assertFalse(check.connected)
        self.assertTrue(any("giving up" in line for line in logs.output))

    @mock.patch("core.liveness.ping_database")
    def test_recovery_after_failed_attempt(self, ping):
        ping.side_effect = [OperationalError("starting up"), None]
        check = self._check()

        with self.assertLogs("core.liveness", level="INFO"):
            self.assertFalse(check.run_attempt())
            self.assertTrue(check.run_attempt())

        self.assertTrue(check.connected)
        self.assertEqual(check.retries, 1)

    @mock.patch("core.liveness.threading.Timer")
    def test_start_does_not_block(self, timer_cls):
        check = LivenessCheck(max_retries=1, retry_delay=1.0)

        check.start()

        timer_cls.assert_called_once_with(0.0, check._run_in_thread)
        self.assertTrue(timer_cls.return_value.daemon)
        timer_cls.return_value.start.assert_called_once_with()

    @mock.patch("core.liveness.connections")
    def test_thread_run_releases_connections(self, connections):
        check = LivenessCheck(max_retries=0, retry_delay=0.0)
        check.run_attempt = mock.Mock(side_effect=RuntimeError("boom"))

        with self.assertRaises(RuntimeError):
            check._run_in_thread()

        connections.close_all.assert_called_once_with()


class GracefulShutdownTests(SimpleTestCase):
    def test_server_waits_for_request_threads(self):
        self.assertFalse(GracefulWSGIServer.daemon_threads)
        self.assertTrue(GracefulWSGIServer.block_on_close)

    def test_signal_handler_shuts_server_down_off_thread(self):
        stopped = threading.Event()
        httpd = mock.Mock()
        httpd.shutdown.side_effect = stopped.set

        with mock.patch("core.server.signal.signal") as register:
            handler = install_shutdown_handler(httpd)

        registered = {call.args[0] for call in register.call_args_list}
        self.assertEqual(registered, {signal.SIGTERM, signal.SIGINT})

        with self.assertLogs("core.server", level="INFO") as logs:
            handler(signal.SIGTERM, None)

        self.assertTrue(stopped.wait(timeout=2))
        self.assertIn("SIGTERM received", logs.output[0])


def _text_app(body: bytes, before_response=None):
    def application(environ, start_response):
        if before_response is not None:
            before_response()
        start_response("200 OK", [("Content-Type", "text/plain"), ("Content-Length", str(len(body)))])
        return [body]

    return application


class ServerLifecycleTests(SimpleTestCase):
    """Runs the real listener on an ephemeral port."""

    def _start(self, application):
        httpd = create_server("127.0.0.1", 0, application)
        self.addCleanup(httpd.socket.close)
        result = {}

        def run():
            with mock.patch("core.server.install_shutdown_handler"):
                result["exit_code"] = serve(httpd, mode="test")

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return httpd, thread, result

    def _connect(self, httpd) -> http.client.HTTPConnection:
        host, port = httpd.server_address[:2]
        connection = http.client.HTTPConnection(host, port, timeout=5)
        self.addCleanup(connection.close)
        return connection

    def test_idle_keep_alive_connection_does_not_block_shutdown(self):
        httpd, thread, result = self._start(_text_app(b"ok"))
        connection = self._connect(httpd)
        connection.request("GET", "/api/app-mode/")
        response = connection.getresponse()
        self.assertEqual(response.status, 200)
        self.assertEqual(response.read(), b"ok")

        with self.assertLogs("core.server", level="INFO"):
            httpd.shutdown()
            thread.join(timeout=5)

        self.assertFalse(thread.is_alive())
        self.assertEqual(result["exit_code"], 0)

    def test_in_flight_request_finishes_before_exit(self):
        started = threading.Event()
        release = threading.Event()

        def hold():
            started.set()
            release.wait(timeout=5)

        httpd, thread, result = self._start(_text_app(b"slow response", before_response=hold))
        connection = self._connect(httpd)
        replies = {}

        def client():
            connection.request("GET", "/products")
            response = connection.getresponse()
            replies["status"] = response.status
            replies["body"] = response.read()

        client_thread = threading.Thread(target=client, daemon=True)
        client_thread.start()
        self.assertTrue(started.wait(timeout=5))

        with self.assertLogs("core.server", level="INFO"):
            httpd.shutdown()
            thread.join(timeout=0.3)
            self.assertTrue(thread.is_alive())

            release.set()
            thread.join(timeout=5)
            client_thread.join(timeout=5)

        self.assertFalse(thread.is_alive())
        self.assertEqual(result["exit_code"], 0)
        self.assertEqual(replies, {"status": 200, "body": b"slow response"})
