"""
Solana JSON-RPC collaborator.

The vote casting service depends only on the ``BlockchainClient`` protocol,
so tests can inject a fake while production uses ``SolanaRpcClient``.
"""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

import base58
import httpx

from chainvote.core.constants import BlockchainConfig
from chainvote.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class VerificationStatus(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    ERROR = "error"


@dataclass
class VerificationResult:
    status: VerificationStatus
    reason: str = ""

    @property
    def confirmed(self) -> bool:
        return self.status == VerificationStatus.CONFIRMED


@dataclass
class TransactionInfo:
    signature: str
    slot: Optional[int]
    block_time: Optional[int]
    succeeded: bool
    signers: List[str] = field(default_factory=list)
    memo: Optional[Any] = None


class BlockchainClient(Protocol):
    def get_transaction(self, signature: str) -> Optional[TransactionInfo]:
        ...

    def verify_transaction(self, signature: str, expected_signer: str) -> VerificationResult:
        ...


def generate_blockchain_address() -> str:
    """A public-key-shaped identifier: base58 of 32 random bytes."""
    return base58.b58encode(secrets.token_bytes(32)).decode("ascii")


def _parse_memo(instruction: Dict[str, Any]) -> Optional[Any]:
    parsed = instruction.get("parsed")
    if not isinstance(parsed, str):
        return None
    try:
        return json.loads(parsed)
    except ValueError:
        # Plain-text memo, not vote metadata
        return None


def parse_transaction(signature: str, result: Dict[str, Any]) -> TransactionInfo:
    """Build a TransactionInfo from a jsonParsed ``getTransaction`` result."""
    message = result.get("transaction", {}).get("message", {})
    signers = [
        key["pubkey"]
        for key in message.get("accountKeys", [])
        if isinstance(key, dict) and key.get("signer")
    ]

    memo = None
    for instruction in message.get("instructions", []):
        is_memo = (
            instruction.get("programId") == BlockchainConfig.MEMO_PROGRAM_ID
            or instruction.get("program") == "spl-memo"
        )
        if is_memo:
            memo = _parse_memo(instruction)
            if memo is not None:
                break

    meta = result.get("meta") or {}
    return TransactionInfo(
        signature=signature,
        slot=result.get("slot"),
        block_time=result.get("blockTime"),
        succeeded=meta.get("err") is None,
        signers=signers,
        memo=memo,
    )


class SolanaRpcClient:
    """Talks to a Solana RPC node over HTTP. One attempt per call, no retries."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        *,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url or BlockchainConfig.rpc_url()
        self.timeout_seconds = timeout_seconds or BlockchainConfig.timeout_seconds()
        self._transport = transport

    def _call(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        timeout = httpx.Timeout(self.timeout_seconds)
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Solana RPC {method} failed: {exc}")
            raise ExternalServiceError(
                "Failed to reach the blockchain RPC endpoint",
                rpc_method=method,
            ) from exc

        if body.get("error"):
            logger.error(f"Solana RPC {method} returned error: {body['error']}")
            raise ExternalServiceError(
                "Blockchain RPC returned an error",
                rpc_method=method,
                rpc_error=body["error"],
            )
        return body.get("result")

    def get_transaction(self, signature: str) -> Optional[TransactionInfo]:
        result = self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": BlockchainConfig.COMMITMENT,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
        if result is None:
            return None
        return parse_transaction(signature, result)

    def verify_transaction(self, signature: str, expected_signer: str) -> VerificationResult:
        try:
            info = self.get_transaction(signature)
        except ExternalServiceError as exc:
            return VerificationResult(VerificationStatus.ERROR, exc.message)

        if info is None:
            return VerificationResult(VerificationStatus.REJECTED, "Invalid transaction signature")
        if not info.succeeded:
            return VerificationResult(VerificationStatus.REJECTED, "Transaction failed on chain")
        if expected_signer not in info.signers:
            return VerificationResult(VerificationStatus.REJECTED, "Transaction not signed by claimed wallet")

        logger.info(f"Blockchain transaction verified: {signature}")
        return VerificationResult(VerificationStatus.CONFIRMED)
