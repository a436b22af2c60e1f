# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    errors.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

# errors.py
'''
Failure taxonomy for everything that talks to a node.

FetchError
 +-- TransportError      connection problems, timeouts
 |    +-- RESTError      non-200 answer of the REST header endpoint
 |    +-- RPCError       JSON-RPC error object or failed RPC HTTP answer
 +-- DecodeError         malformed header chunk or RPC payload
 +-- DataError           node data is inconsistent (e.g. no active tip)
 +-- NotSupportedError   backend lacks the call
 +-- DispatchError       the worker thread dispatch itself failed
'''

from typing import Optional


class FetchError(Exception):
    """Base class for all failures while fetching data from a node."""


class TransportError(FetchError):
    """Connection errors and timeouts."""


class RESTError(TransportError):
    """The REST endpoint answered with something other than HTTP 200."""

    def __init__(self, url: str, status: int, reason: Optional[str], body: str):
        self.url = url
        self.status = status
        self.reason = reason
        self.body = body
        super().__init__(
            f"could not load headers from REST URL ({url}): {status} {reason}: {body!r}"
        )


class RPCError(TransportError):
    """An RPC call failed. `code` is the JSON-RPC error code (or HTTP status)."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC error {code}: {message}")


class DecodeError(FetchError):
    """A response could not be deserialized."""


class DataError(FetchError):
    """The node reported data we cannot work with."""


class NotSupportedError(FetchError):
    """The backend does not implement the requested call."""


class DispatchError(FetchError):
    """A blocking call could not be dispatched to or joined from a worker thread."""
