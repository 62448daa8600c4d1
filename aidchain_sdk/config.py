"""
Configuration for the AidChain SDK and the sponsor relay.

Three layers are provided:

* NetworkConfig - packaged table of Sui networks (RPC and explorer URLs)
* AidChainConfig - the deployment a client talks to, injected into the
  intent builder and the flow coordinators
* RelaySettings - process configuration of the sponsor relay
"""
import importlib.resources
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

WILDCARD_TARGET = "*"

# Deployment used by the original AidChain frontend (testnet, V10)
DEFAULT_PACKAGE_ID = "0x1157d993f30167c9d5552d61d5a0e838871f6fe3b1e36312beeb5b8825891ce1"
DEFAULT_REGISTRY_ID = "0x5763027400406393cc10ae18707cb9b9e087ddf618f550db57fc924474608e49"
DEFAULT_REGISTRY_INITIAL_SHARED_VERSION = 670251448
DEFAULT_COORDINATOR = "0xa9778469f5de301ae6d149f8cabb73f76b6984f744479ea3b7e16562433bcf9a"
DEFAULT_SPONSOR_BACKEND_URL = "http://localhost:3001"
DEFAULT_ENOKI_API_URL = "https://api.enoki.mystenlabs.com/v1"
MODULE_NAME = "aidchain"

# Functions that may be gas-sponsored by default
SPONSORED_FUNCTIONS = (
    "donate",
    "register_recipient",
    "create_verification_proposal",
    "vote_on_proposal",
    "execute_proposal",
)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = env.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got: {value}")


class NetworkConfig:
    """Lookup of Sui network endpoints from the packaged networks.json."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions, caching them after the first read.

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("aidchain_sdk").joinpath("networks.json")
            with resource.open("r", encoding="utf-8") as f:
                cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the configuration of a single network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            raise ValueError(
                f"Network '{network}' not found. Available networks: {', '.join(networks)}"
            )
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve the fullnode RPC URL for a network.

        Precedence: explicit override, then ``<NETWORK>_RPC_URL`` from the
        environment, then the packaged default.
        """
        if override:
            return override
        env_var = f"{network.upper().replace('-', '_')}_RPC_URL"
        if os.environ.get(env_var):
            return os.environ[env_var]
        return cls.get_network(network)["rpc"]

    @classmethod
    def explorer_url(cls, network: str, digest: str) -> str:
        return cls.get_network(network)["explorer"].format(digest=digest)


@dataclass(frozen=True)
class AidChainConfig:
    """
    Deployment configuration shared by intent building and the flows.

    Attributes:
        network: Sui network name
        package_id: Published aidchain package id
        registry_id: Shared AidRegistry object id
        registry_initial_shared_version: Initial shared version of the registry
        coordinator_address: Default coordinator for donations
        sponsor_backend_url: Base URL of the sponsor relay
        sponsored_enabled: Route transactions through the relay when True
        allow_wildcard: Permit the "*" allow-list (demo deployments only)
    """
    network: str = "testnet"
    package_id: str = DEFAULT_PACKAGE_ID
    registry_id: str = DEFAULT_REGISTRY_ID
    registry_initial_shared_version: int = DEFAULT_REGISTRY_INITIAL_SHARED_VERSION
    coordinator_address: str = DEFAULT_COORDINATOR
    sponsor_backend_url: str = DEFAULT_SPONSOR_BACKEND_URL
    sponsored_enabled: bool = False
    allow_wildcard: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AidChainConfig":
        """Build a configuration from ``AIDCHAIN_*`` and sponsor variables."""
        env = os.environ if env is None else env
        return cls(
            network=env.get("AIDCHAIN_NETWORK") or "testnet",
            package_id=env.get("AIDCHAIN_PACKAGE_ID") or DEFAULT_PACKAGE_ID,
            registry_id=env.get("AIDCHAIN_REGISTRY_ID") or DEFAULT_REGISTRY_ID,
            registry_initial_shared_version=_env_int(
                env, "AIDCHAIN_REGISTRY_INITIAL_SHARED_VERSION", DEFAULT_REGISTRY_INITIAL_SHARED_VERSION
            ),
            coordinator_address=env.get("AIDCHAIN_COORDINATOR") or DEFAULT_COORDINATOR,
            sponsor_backend_url=(env.get("SPONSOR_BACKEND_URL") or DEFAULT_SPONSOR_BACKEND_URL).rstrip("/"),
            sponsored_enabled=_env_flag(env, "SPONSORED_TX_ENABLED"),
            allow_wildcard=_env_flag(env, "SPONSOR_ALLOW_WILDCARD"),
        )

    def target(self, function: str) -> str:
        return f"{self.package_id}::{MODULE_NAME}::{function}"

    def default_allow_list(self) -> List[str]:
        return [self.target(name) for name in SPONSORED_FUNCTIONS]

    @property
    def rpc_url(self) -> str:
        return NetworkConfig.get_rpc_url(self.network)


@dataclass(frozen=True)
class RelaySettings:
    """
    Process configuration of the sponsor relay.

    The credential is read once at startup and never leaves this object;
    ``repr`` masks it.
    """
    enoki_api_key: str = field(repr=False)
    port: int = 3001
    enoki_api_url: str = DEFAULT_ENOKI_API_URL
    allow_wildcard: bool = False
    cors_origins: Tuple[str, ...] = ("*",)
    upstream_timeout: int = 30

    def __post_init__(self):
        if not self.enoki_api_key:
            raise ConfigurationError("ENOKI_PRIVATE_KEY environment variable is required")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RelaySettings":
        """
        Read relay settings from the environment.

        Raises:
            ConfigurationError: If ENOKI_PRIVATE_KEY is missing or a value is malformed
        """
        env = os.environ if env is None else env
        origins = tuple(
            origin.strip() for origin in (env.get("CORS_ORIGINS") or "*").split(",") if origin.strip()
        )
        return cls(
            enoki_api_key=env.get("ENOKI_PRIVATE_KEY", ""),
            port=_env_int(env, "PORT", 3001),
            enoki_api_url=(env.get("ENOKI_API_URL") or DEFAULT_ENOKI_API_URL).rstrip("/"),
            allow_wildcard=_env_flag(env, "SPONSOR_ALLOW_WILDCARD"),
            cors_origins=origins or ("*",),
            upstream_timeout=_env_int(env, "ENOKI_TIMEOUT", 30),
        )

    @property
    def masked_key(self) -> str:
        return f"{self.enoki_api_key[:6]}..."
