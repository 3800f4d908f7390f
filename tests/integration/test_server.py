"""
End-to-end tests: a real FileServer on a local socket.
"""

import json
import logging
import socket
import threading

import pytest

from conftest import INDEX_HTML, RunningServer, send_raw, split_response
from fileserver import FileServer


class TestServing:
    """Successful exchanges."""

    def test_root_serves_index(self, running_server):
        status, headers, body = split_response(running_server.get("/"))

        assert status == "HTTP/1.1 200 OK"
        assert headers == {"Content-Type": "text/html"}
        assert body == INDEX_HTML

    def test_plain_file(self, running_server):
        status, headers, body = split_response(running_server.get("/notes.txt"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/plain"
        assert body == b"plain notes\n"

    def test_binary_file(self, running_server):
        status, headers, body = split_response(running_server.get("/blob"))

        assert headers["Content-Type"] == "application/octet-stream"
        assert body == bytes(range(256))

    def test_no_extra_headers(self, running_server):
        raw = running_server.get("/data.json")

        assert raw.startswith(
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n"
        )

    def test_large_file_streamed_whole(self, running_server, docroot):
        data = b"0123456789abcdef" * 20000
        (docroot / "big.bin").write_bytes(data)

        _, _, body = split_response(running_server.get("/big.bin"))
        assert body == data

    def test_directory_redirect(self, running_server):
        raw = running_server.get("/sub")

        assert raw == b"HTTP/1.1 301 Moved Permanently\r\nLocation: /sub/\r\n\r\n"

    def test_redirect_keeps_query(self, running_server):
        _, headers, _ = split_response(running_server.get("/sub?x=1"))
        assert headers["Location"] == "/sub/?x=1"

    def test_directory_listing(self, running_server):
        status, headers, body = split_response(running_server.get("/sub/"))

        assert status == "HTTP/1.1 200 OK"
        assert headers == {"Content-Type": "text/html; charset=utf-8"}

        html = body.decode("utf-8")
        first_item = html.index("<li>")
        assert html[first_item:].startswith('<li><a href="..">..</a></li>')
        assert 'href="my%20file.txt"' in html

    def test_not_found(self, running_server):
        raw = running_server.get("/missing.txt")

        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_name_too_long(self, running_server):
        raw = running_server.get("/" + "a" * 300)

        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_traversal_stays_inside_root(self, running_server, docroot):
        (docroot / "etc").mkdir()
        (docroot / "etc" / "passwd").write_text("inside the root")

        _, _, body = split_response(running_server.get("/../../etc/passwd"))
        assert body == b"inside the root"

    def test_traversal_without_target_is_404(self, running_server):
        status, _, _ = split_response(running_server.get("/../../../../../../etc/hostname"))
        assert status == "HTTP/1.1 404 Not Found"

    def test_percent_encoded_name(self, running_server):
        _, _, body = split_response(running_server.get("/sub/my%20file.txt"))
        assert body == b"spaced"

    def test_lf_only_request(self, running_server):
        raw = running_server.request(b"GET /notes.txt HTTP/1.1\n\n")
        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")


class TestRejected:
    """Requests closed without any response bytes."""

    @pytest.mark.parametrize("raw", [
        b"POST / HTTP/1.1\r\n\r\n",
        b"GET / HTTP/1.0\r\n\r\n",
        b"GET foo HTTP/1.1\r\n\r\n",
        b"GET /bad%zz HTTP/1.1\r\n\r\n",
        b"GET /\r\n\r\n",
        b"\xff\xfe\r\n\r\n",
    ])
    def test_no_response(self, running_server, raw):
        assert running_server.request(raw) == b""

    def test_server_keeps_serving(self, running_server):
        assert running_server.request(b"POST / HTTP/1.1\r\n\r\n") == b""
        assert running_server.request(b"garbage\r\n\r\n") == b""

        status, _, _ = split_response(running_server.get("/"))
        assert status == "HTTP/1.1 200 OK"

    def test_client_disconnect_before_request(self, running_server):
        with socket.create_connection(("127.0.0.1", running_server.port)):
            pass

        status, _, _ = split_response(running_server.get("/"))
        assert status == "HTTP/1.1 200 OK"

    def test_oversized_request_line(self, running_server):
        raw = b"GET /" + b"a" * 10000 + b" HTTP/1.1\r\n\r\n"
        try:
            assert running_server.request(raw) == b""
        except ConnectionError:
            pass  # Server closed with unread bytes in its buffer


class TestConcurrency:

    def test_parallel_requests(self, running_server):
        results = []
        lock = threading.Lock()

        def fetch():
            status, _, _ = split_response(running_server.get("/notes.txt"))
            with lock:
                results.append(status)

        threads = [threading.Thread(target=fetch) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert results == ["HTTP/1.1 200 OK"] * 20

    def test_slow_client_does_not_block_others(self, running_server):
        with socket.create_connection(("127.0.0.1", running_server.port)) as idle:
            idle.sendall(b"GET / HTTP/1.1\r\n")   # never finishes its head

            status, _, _ = split_response(running_server.get("/notes.txt"))
            assert status == "HTTP/1.1 200 OK"


class TestLifecycle:

    def test_idle_connection_times_out(self, config):
        config.timeout = 0.5
        srv = RunningServer(FileServer(config, install_signals=False))
        srv.start()
        try:
            with socket.create_connection(("127.0.0.1", srv.port), timeout=5.0) as s:
                s.sendall(b"GET / HTTP/1.1\r\n")
                assert s.recv(1024) == b""
        finally:
            srv.stop()

    def test_shutdown_closes_listener(self, config):
        srv = RunningServer(FileServer(config, install_signals=False))
        srv.start()
        port = srv.port
        srv.stop()

        assert srv.server.wait_for_shutdown(timeout=5.0)
        with pytest.raises(OSError):
            send_raw(port, b"GET / HTTP/1.1\r\n\r\n", timeout=1.0)

    def test_invalid_root_rejected(self, config, tmp_path):
        config.root_dir = str(tmp_path / "missing")
        with pytest.raises(ValueError):
            FileServer(config, install_signals=False)

    def test_startup_banner(self, capsys, running_server):
        out = capsys.readouterr().out
        assert f"Listening on http://127.0.0.1:{running_server.port}" in out
        assert "Serving directory:" in out


class TestAccessLog:

    def test_text_line(self, running_server, caplog):
        with caplog.at_level(logging.INFO, logger="fileserver.access"):
            running_server.get("/notes.txt")
            running_server.stop()

        lines = [r.getMessage() for r in caplog.records if r.name == "fileserver.access"]
        assert len(lines) == 1
        assert lines[0].startswith("127.0.0.1 - - [")
        assert '"GET /notes.txt" 200 ' in lines[0]
        assert lines[0].endswith("ms")

    def test_json_line(self, config, caplog):
        config.log_format = "json"
        srv = RunningServer(FileServer(config, install_signals=False))
        srv.start()
        with caplog.at_level(logging.INFO, logger="fileserver.access"):
            srv.get("/sub")
            srv.stop()

        entries = [json.loads(r.getMessage()) for r in caplog.records
                   if r.name == "fileserver.access"]
        assert len(entries) == 1
        assert entries[0]["method"] == "GET"
        assert entries[0]["target"] == "/sub"
        assert entries[0]["status_code"] == 301
        assert entries[0]["bytes_sent"] == 0

    def test_rejected_request_not_logged(self, running_server, caplog):
        with caplog.at_level(logging.INFO, logger="fileserver.access"):
            running_server.request(b"POST / HTTP/1.1\r\n\r\n")
            running_server.stop()

        assert not [r for r in caplog.records if r.name == "fileserver.access"]
