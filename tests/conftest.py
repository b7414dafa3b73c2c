import queue
import socket
import socketserver
import threading

import pytest


class _PrinterHandler(socketserver.BaseRequestHandler):
    def handle(self):
        chunks = []
        while True:
            data = self.request.recv(4096)
            if not data:
                break
            chunks.append(data)
        self.server.received.put(b"".join(chunks))


class FakePrinterServer(socketserver.ThreadingTCPServer):
    """Accepts raw 9100-style connections and records each payload."""
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self):
        self.received = queue.Queue()
        super().__init__(("127.0.0.1", 0), _PrinterHandler)

    @property
    def port(self):
        return self.server_address[1]

    def next_payload(self, timeout=2.0):
        return self.received.get(timeout=timeout)


@pytest.fixture
def printer_server():
    """Factory starting fake network printers on ephemeral ports."""
    servers = []

    def start():
        server = FakePrinterServer()
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def closed_port():
    """A local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
