from adapters.pipedream.auth import PipedreamTokenCache  # noqa: F401
from adapters.pipedream.connect_proxy import ConnectProxy  # noqa: F401

__all__ = ["PipedreamTokenCache", "ConnectProxy"]
