"""Raw TCP (port 9100) printer connection."""
import logging
import socket
import struct
import time
from typing import Optional

from shabu_printing.models import ErrorKind, PrinterTarget

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9100
DEFAULT_DEADLINE = 12.0
# Time the socket stays open after the write so slow firmware can drain its
# receive buffer; closing immediately truncates prints on some models. Tuned
# on hardware, not documented by vendors.
DEFAULT_DRAIN_DELAY = 0.2


class PrinterError(ConnectionError):
    """Base class for transport failures."""
    kind: ErrorKind

    def __init__(self, message: str, reason: Optional[BaseException] = None):
        super().__init__(message)
        self.reason = reason


class ConnectFailure(PrinterError):
    kind = ErrorKind.CONNECT


class WriteFailure(PrinterError):
    kind = ErrorKind.WRITE


class TimeoutFailure(PrinterError):
    kind = ErrorKind.TIMEOUT


class NetworkPrinter:
    """TCP/IP network printer connection.

    One call to :meth:`print_data` opens one connection, writes the payload,
    waits ``drain_delay`` and closes. A single deadline covers the whole
    sequence; when it expires the connection is aborted.
    """

    def __init__(self, ip: str, port: int = DEFAULT_PORT,
                 deadline: float = DEFAULT_DEADLINE,
                 drain_delay: float = DEFAULT_DRAIN_DELAY):
        self.ip = ip
        self.port = port
        self.deadline = deadline
        self.drain_delay = drain_delay
        self._socket: Optional[socket.socket] = None
        self._expires_at: Optional[float] = None

    def _remaining(self) -> float:
        remaining = self._expires_at - time.monotonic()
        if remaining <= 0:
            raise TimeoutFailure(f"Printer {self} timed out after {self.deadline}s")
        return remaining

    def connect(self) -> None:
        """Connect to network printer.

        Resolved addresses are tried in turn, each bounded by what is left
        of the deadline.
        """
        self._socket = None
        try:
            addresses = socket.getaddrinfo(self.ip, self.port, type=socket.SOCK_STREAM)
        except (OSError, UnicodeError) as e:
            # idna rejects malformed names with UnicodeError
            raise ConnectFailure(f"Failed to resolve {self}: {e}", e)

        error: Optional[OSError] = None
        for family, socktype, proto, _, address in addresses:
            timeout = self._remaining()
            sock = socket.socket(family, socktype, proto)
            try:
                sock.settimeout(timeout)
                sock.connect(address)
            except socket.timeout as e:
                sock.close()
                raise TimeoutFailure(f"Timed out connecting to {self}", e)
            except OSError as e:
                sock.close()
                error = e
                continue
            self._socket = sock
            return

        raise ConnectFailure(f"Failed to connect to {self}: {error}", error)

    def write(self, data: bytes) -> None:
        """Send the whole payload in one write."""
        if not self._socket:
            raise ConnectFailure("Not connected")
        timeout = self._remaining()
        try:
            self._socket.settimeout(timeout)
            self._socket.sendall(data)
        except socket.timeout as e:
            raise TimeoutFailure(f"Timed out sending to {self}", e)
        except OSError as e:
            raise WriteFailure(f"Failed to send data to {self}: {e}", e)

    def drain(self) -> None:
        """Hold the connection open while the printer consumes its buffer."""
        remaining = self._remaining()
        if remaining <= self.drain_delay:
            time.sleep(remaining)
            raise TimeoutFailure(f"Printer {self} timed out after {self.deadline}s")
        time.sleep(self.drain_delay)

    def disconnect(self) -> None:
        """Close network connection gracefully."""
        if self._socket:
            try:
                self._socket.shutdown(socket.SHUT_WR)
            except OSError:
                pass
            self._socket.close()
            self._socket = None

    def abort(self) -> None:
        """Reset the connection without a graceful close."""
        if self._socket:
            try:
                self._socket.setsockopt(
                    socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0)
                )
            except OSError:
                pass
            self._socket.close()
            self._socket = None

    def is_connected(self) -> bool:
        """Check if socket is connected."""
        return self._socket is not None

    def print_data(self, data: bytes) -> None:
        """Connect, send data, drain and disconnect.

        Raises:
            ConnectFailure, WriteFailure, TimeoutFailure
        """
        self._expires_at = time.monotonic() + self.deadline
        try:
            self.connect()
            self.write(data)
            self.drain()
        except PrinterError:
            self.abort()
            raise
        self.disconnect()

    def __repr__(self):
        return f"NetworkPrinter({self.ip}:{self.port})"

    def __str__(self):
        return f"{self.ip}:{self.port}"


def create_printer(target: PrinterTarget, deadline: float = DEFAULT_DEADLINE,
                   drain_delay: float = DEFAULT_DRAIN_DELAY) -> NetworkPrinter:
    """Create a printer connection for a configured target."""
    return NetworkPrinter(
        ip=target.host,
        port=target.port,
        deadline=deadline,
        drain_delay=drain_delay,
    )


def deliver(host: str, port: int, payload: bytes,
            deadline: float = DEFAULT_DEADLINE,
            drain_delay: float = DEFAULT_DRAIN_DELAY) -> None:
    """Deliver one payload to ``host:port``; raises a PrinterError on failure."""
    NetworkPrinter(host, port, deadline=deadline, drain_delay=drain_delay).print_data(payload)
