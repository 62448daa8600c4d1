"""
AidChainClient - Main client for the AidChain aid-distribution contracts.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from .config import SPONSORED_FUNCTIONS, AidChainConfig, NetworkConfig
from .exceptions import DecodeError, LedgerError, TransportError, ValidationError
from .flow import DirectFlowCoordinator, SponsoredFlowCoordinator
from .intent import IntentBuilder, OwnedObjectArg, TransactionIntent, require_text, to_base_units
from .ledger import SuiLedgerClient
from .models import ExecutionOutcome
from .outcome import EFFECTS_FAILURE, classify
from .records import (
    AidPackage, RecipientProfile, decode_aid_package, decode_aid_registry, decode_recipient_profile
)
from .relay_client import RelayClient
from .signer import Signer
from .signing import SignatureCoordinator
from .walrus import WalrusClient


class AidChainClient:
    """
    Client for interacting with the AidChain contracts.

    This client handles:
    1. Building intents for donations, registrations, verifications and deliveries
    2. Routing them through the sponsor relay (when enabled) or paying gas directly
    3. Reading registry contents for display

    Every write returns an ExecutionOutcome; use ``outcome.message`` for
    user-facing text and ``outcome.raise_for_status()`` to turn failures into
    exceptions.
    """

    def __init__(
        self,
        signer: Signer,
        config: Optional[AidChainConfig] = None,
        ledger: Optional[SuiLedgerClient] = None,
        relay: Optional[RelayClient] = None,
        walrus: Optional[WalrusClient] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the AidChainClient

        Args:
            signer: Signing agent for the user's account
            config: Deployment configuration (defaults to AidChainConfig.from_env())
            ledger: Fullnode client (defaults to the configured network's RPC)
            relay: Sponsor relay client (defaults to config.sponsor_backend_url)
            walrus: Evidence storage client
            logger: Optional logger instance to use for debug/info logging
        """
        self.config = config or AidChainConfig.from_env()
        self.logger = logger or logging.getLogger(__name__)
        self.ledger = ledger or SuiLedgerClient(self.config.rpc_url)
        self.walrus = walrus or WalrusClient()
        self.builder = IntentBuilder(self.config)
        self.signatures = SignatureCoordinator(signer)
        self.direct = DirectFlowCoordinator(self.ledger, self.signatures)
        self.sponsored: Optional[SponsoredFlowCoordinator] = None
        if self.config.sponsored_enabled:
            self.sponsored = SponsoredFlowCoordinator(
                self.config,
                relay or RelayClient(self.config.sponsor_backend_url),
                self.signatures,
                ledger=self.ledger,
            )

    @property
    def address(self) -> str:
        return self.signatures.address

    def submit(
        self,
        intent: TransactionIntent,
        sponsored: Optional[bool] = None,
        allow_list: Optional[Iterable[str]] = None
    ) -> ExecutionOutcome:
        """
        Run an intent through the sponsored or the direct flow.

        Args:
            intent: Intent to execute
            sponsored: Force (True) or skip (False) sponsorship; when None,
                sponsor if enabled and the function is in SPONSORED_FUNCTIONS
            allow_list: Sponsorship allow-list override

        Raises:
            ValidationError: If sponsorship is requested while disabled
        """
        use_sponsor = self._use_sponsor(sponsored, intent.function)
        if use_sponsor:
            return self.sponsored.run(intent, allow_list)
        return self.direct.run(intent)

    def donate(
        self,
        description: str,
        location: str,
        amount: Union[str, int, float, Decimal],
        coordinator: Optional[str] = None,
        sponsored: Optional[bool] = None
    ) -> ExecutionOutcome:
        """
        Donate ``amount`` SUI.

        With sponsorship the donation is split from one of the sender's coins,
        since the gas coin belongs to the sponsor.

        Raises:
            ValidationError: If a field is invalid or no single coin covers
                the amount in sponsored mode
        """
        use_sponsor = self._use_sponsor(sponsored, "donate")
        funding_coin = None
        if use_sponsor:
            # Validate before touching the network
            self.builder.donate(self.address, description, location, amount, coordinator)
            try:
                funding_coin = self._funding_coin(to_base_units(amount))
            except (TransportError, LedgerError) as e:
                return self._lookup_failed(e)
        intent = self.builder.donate(
            self.address, description, location, amount,
            coordinator=coordinator, funding_coin=funding_coin,
        )
        return self.submit(intent, sponsored=use_sponsor)

    def register_recipient(
        self,
        name: str,
        location: str,
        need_category: str,
        national_id: str,
        phone: str,
        evidence: Optional[bytes] = None,
        family_size: Union[str, int] = 1,
        description: str = "",
        sponsored: Optional[bool] = None
    ) -> ExecutionOutcome:
        """
        Register the signer as a recipient, uploading evidence first if given.

        Raises:
            ValidationError: If a field is invalid (checked before any upload)
            StorageError: If the evidence upload fails
        """
        fields = dict(
            name=name, location=location, need_category=need_category,
            national_id=national_id, phone=phone, family_size=family_size,
            description=description,
        )
        intent = self.builder.register_recipient(self.address, **fields)
        if evidence:
            blob_id = self.walrus.upload(evidence)
            intent = self.builder.register_recipient(self.address, evidence_blob_id=blob_id, **fields)
        return self.submit(intent, sponsored=sponsored)

    def verify_recipient(self, profile_id: str, sponsored: Optional[bool] = None) -> ExecutionOutcome:
        """
        Verify a registered recipient profile.

        Raises:
            DecodeError: If the profile does not exist
        """
        try:
            profile = self.ledger.get_object_ref(profile_id)
        except (TransportError, LedgerError) as e:
            return self._lookup_failed(e)
        return self.submit(self.builder.verify_recipient(self.address, profile), sponsored=sponsored)

    def mark_delivered(self, package_id: str, proof_url: str, sponsored: Optional[bool] = None) -> ExecutionOutcome:
        """
        Mark an aid package as delivered with a proof link.

        Raises:
            ValidationError: If the proof URL is empty
            DecodeError: If the package does not exist
        """
        require_text("Proof URL", proof_url)
        try:
            package = self.ledger.get_object_ref(package_id)
        except (TransportError, LedgerError) as e:
            return self._lookup_failed(e)
        return self.submit(self.builder.mark_delivered(self.address, package, proof_url), sponsored=sponsored)

    def load_packages(self, registry_id: Optional[str] = None) -> List[AidPackage]:
        """
        Load and decode every aid package listed in the registry.

        Packages that fail to decode are skipped with a warning.

        Raises:
            DecodeError: If the registry itself cannot be decoded
        """
        registry = decode_aid_registry(self.ledger.get_object(registry_id or self.config.registry_id))
        packages = []
        for response in self.ledger.multi_get_objects(registry.packages):
            try:
                packages.append(decode_aid_package(response))
            except DecodeError as e:
                self.logger.warning(f"Skipping aid package: {e}")
        return packages

    def load_unverified_recipients(self) -> List[RecipientProfile]:
        registry = decode_aid_registry(self.ledger.get_object(self.config.registry_id))
        profiles = []
        for response in self.ledger.multi_get_objects(registry.recipient_profiles):
            try:
                profile = decode_recipient_profile(response)
            except DecodeError as e:
                self.logger.warning(f"Skipping recipient profile: {e}")
                continue
            if not profile.is_verified:
                profiles.append(profile)
        return profiles

    def explorer_url(self, digest: str) -> str:
        return NetworkConfig.explorer_url(self.config.network, digest)

    def _use_sponsor(self, sponsored: Optional[bool], function: str) -> bool:
        if sponsored is None:
            # Functions outside the sponsored set always pay their own gas
            return self.sponsored is not None and function in SPONSORED_FUNCTIONS
        if sponsored and self.sponsored is None:
            raise ValidationError("Sponsored transactions are disabled")
        return sponsored

    def _lookup_failed(self, error: Exception) -> ExecutionOutcome:
        # Nothing was built or submitted yet
        self.logger.warning(f"Ledger lookup failed: {error}")
        if isinstance(error, LedgerError):
            return classify(str(error), EFFECTS_FAILURE)
        return classify(str(error))

    def _funding_coin(self, amount: int) -> OwnedObjectArg:
        for ref, balance in self.ledger.get_coins(self.address):
            if balance >= amount:
                return ref
        raise ValidationError(f"No single coin holds {amount} MIST; merge coins first")
