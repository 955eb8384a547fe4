"""
Client facade: owns the transport and exposes the registry module operations.
"""

from __future__ import annotations

import logging
from typing import Any

from tfe_registry.api.client import RegistryAPIClient
from tfe_registry.config import get_registry_section, validate_config
from tfe_registry.logging import configure_logging
from tfe_registry.registry_modules import RegistryModules

logger = logging.getLogger(__name__)


class Client:
    """
    Entry point for callers.

    Example:
        with Client.from_config(load_config()) as client:
            module = client.registry_modules.read(Context.background(), "acme", "vpc", "aws")
    """

    def __init__(
        self, transport: RegistryAPIClient, strict_decoding: bool = True
    ) -> None:
        self._transport = transport
        self.registry_modules = RegistryModules(
            transport, strict_decoding=strict_decoding
        )

    @classmethod
    def from_config(
        cls, raw_config: dict[str, Any], setup_logging: bool = False
    ) -> Client:
        """
        Build a client from a raw config dict (see tfe_registry.config).

        Raises:
            ValueError: if the registry section is invalid (e.g. no token)
        """
        section = get_registry_section(raw_config)
        validate_config(section)
        if setup_logging:
            configure_logging(section["log_level"], section["log_path"])
        transport = RegistryAPIClient(
            token=section["token"],
            address=section["address"],
            base_path=section["base_path"],
            timeout_sec=section["timeout_sec"],
            retry_max=section["retry_max"],
            retry_delay_sec=section["retry_delay_sec"],
            circuit_breaker_failure_threshold=section[
                "circuit_breaker_failure_threshold"
            ],
            circuit_breaker_recovery_timeout_sec=section[
                "circuit_breaker_recovery_timeout_sec"
            ],
        )
        logger.debug("Registry client for %s", transport.base_url)
        return cls(transport, strict_decoding=section["strict_decoding"])

    def close(self) -> None:
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
