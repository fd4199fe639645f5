"""
Thin wrapper around the GoBGP gRPC API.

GoBGP doesn't publish Python bindings, so the message and service stubs
have to be generated from its .proto files first:

    python -m grpc_tools.protoc -I api --python_out=. --grpc_python_out=. api/*.proto

That produces gobgp_pb2 / gobgp_pb2_grpc, which we import by name at
runtime. Module names are configurable for setups that package the stubs
differently.
"""

from __future__ import annotations

import importlib
import logging
from typing import Dict, Iterator, Optional

import grpc

log = logging.getLogger(__name__)


DEFAULT_ADDRESS = "127.0.0.1:50051"
DEFAULT_API_MODULE = "gobgp_pb2"
DEFAULT_STUB_MODULE = "gobgp_pb2_grpc"

_UNREACHABLE_CODES = frozenset({grpc.StatusCode.UNAVAILABLE})


def is_unreachable(err: grpc.RpcError) -> bool:
    code = getattr(err, "code", None)
    if not callable(code):
        return False
    return code() in _UNREACHABLE_CODES


def describe_error(err: grpc.RpcError) -> str:
    code = getattr(err, "code", None)
    details = getattr(err, "details", None)
    if callable(code) and callable(details):
        return f"{code().name}: {details()}"
    return str(err)


class GoBGPClient:
    """Blocking client for the handful of GoBGP calls the exporter needs."""

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        timeout_seconds: Optional[float] = 10.0,
        api_module: str = DEFAULT_API_MODULE,
        stub_module: str = DEFAULT_STUB_MODULE,
    ):
        self._address = address
        self._timeout = timeout_seconds
        self._api = importlib.import_module(api_module)
        stubs = importlib.import_module(stub_module)
        self._channel = grpc.insecure_channel(address)
        self._stub = stubs.GobgpApiStub(self._channel)

    def get_bgp(self):
        """Global BGP config. Cheap, so it doubles as a liveness probe."""
        return self._stub.GetBgp(self._api.GetBgpRequest(), timeout=self._timeout)

    def list_peer(self) -> Iterator:
        request = self._api.ListPeerRequest(address="", enable_advertised=False)
        return self._stub.ListPeer(request, timeout=self._timeout)

    def list_path(self, table_type: int, afi: int, safi: int) -> Iterator:
        request = self._api.ListPathRequest(
            table_type=table_type,
            family=self._api.Family(afi=afi, safi=safi),
        )
        return self._stub.ListPath(request, timeout=self._timeout)

    def table_types(self) -> Dict[str, int]:
        return dict(self._api.TableType.items())

    def afis(self) -> Dict[str, int]:
        return dict(self._api.Family.Afi.items())

    def safis(self) -> Dict[str, int]:
        return dict(self._api.Family.Safi.items())

    def name(self) -> str:
        return f"GoBGP ({self._address})"

    def close(self):
        self._channel.close()
