from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Optional

from eth_account import Account
from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContractFunction

from core.domain.enums.tx_enums import GasStrategy
from core.services.exceptions import TransactionRevertedError
from core.services.utils import to_json_safe

logger = logging.getLogger(__name__)


class TxService:
    """
    Async transaction sender for Croc contract calls.

    Responsibilities:
    - Build, sign and broadcast contract calls with a local key.
    - Read-only simulation (eth_call) and gas estimation for the same calls.
    - Apply gas padding strategy when no explicit gas limit is given.
    - Wait for receipt (optional) and normalize the result.

    RPC errors are not caught here; they reach the caller as raised by web3.
    """

    def __init__(self, w3: AsyncWeb3, private_key: Optional[str]):
        self.w3 = w3
        self.pk = private_key
        # None without a key; only the signing paths require one.
        self.account = Account.from_key(private_key) if private_key else None

    def _signer(self):
        if self.account is None:
            raise ValueError("private_key is required to sign transactions")
        return self.account

    def sender_address(self) -> str:
        return self._signer().address

    # ---------- internal helpers ----------

    async def _next_nonce(self) -> int:
        return await self.w3.eth.get_transaction_count(self.sender_address(), "pending")

    def _call_args(self, value_wei: int, gas_limit: Optional[int] = None) -> dict:
        args: dict[str, Any] = {"from": self.sender_address(), "value": int(value_wei or 0)}
        if gas_limit is not None:
            args["gas"] = int(gas_limit)
        return args

    async def _finalize_fee_fields(self, tx: dict) -> dict:
        """
        If the caller didn't specify EIP-1559 style fields, fallback to legacy gasPrice.
        """
        if "maxFeePerGas" in tx or "maxPriorityFeePerGas" in tx:
            return tx
        if "gasPrice" not in tx:
            tx["gasPrice"] = await self.w3.eth.gas_price
        return tx

    async def _sign_and_send(self, tx: dict) -> str:
        signed = self._signer().sign_transaction(tx)
        txh = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return txh.hex()

    # ---------- public API ----------

    async def call(self, fn: AsyncContractFunction, *, value: int = 0, gas_limit: Optional[int] = None) -> Any:
        """Simulate the call against the latest block. Never broadcasts."""
        return await fn.call(self._call_args(value, gas_limit))

    async def estimate_gas(self, fn: AsyncContractFunction, *, value: int = 0) -> int:
        return int(await fn.estimate_gas(self._call_args(value)))

    async def build_unsigned(self, fn: AsyncContractFunction, *, value: int = 0, gas_limit: Optional[int] = None) -> dict:
        """Populated but unsigned transaction dict (nonce, gas and fee fields filled)."""
        tx = self._call_args(value, gas_limit)
        tx["nonce"] = await self._next_nonce()
        return await fn.build_transaction(tx)

    async def send(
        self,
        fn: AsyncContractFunction,
        *,
        value: int = 0,
        gas_limit: Optional[int] = None,
        gas_strategy: GasStrategy = GasStrategy.BUFFERED,
        wait: bool = False,
    ) -> dict:
        """
        Broadcasts a state-changing transaction for an already-parameterized contract function.

        Args:
            fn: AsyncContractFunction from web3.py
            value: ETH value (wei) to attach
            gas_limit: Explicit gas limit. When None the node estimate is padded per gas_strategy.
            gas_strategy: "default" | "buffered" | "aggressive"
            wait: If True, wait until mined and attach receipt + status

        Raises:
            TransactionRevertedError: mined with status == 0 (only when wait=True).
        """
        if gas_limit is not None:
            final_gas_limit = int(gas_limit)
        else:
            final_gas_limit = GasStrategy(gas_strategy).pad(await self.estimate_gas(fn, value=value))

        tx = await fn.build_transaction({
            **self._call_args(value, final_gas_limit),
            "nonce": await self._next_nonce(),
        })

        tx = await self._finalize_fee_fields(tx)
        tx_hash = await self._sign_and_send(tx)
        logger.info("broadcast tx=%s gas=%s value=%s", tx_hash, final_gas_limit, tx.get("value"))

        receipt = None
        status = None
        if wait:
            receipt = dict(await self.w3.eth.wait_for_transaction_receipt(tx_hash))
            status = int(receipt.get("status", 0))
            if status == 0:
                raise TransactionRevertedError(
                    tx_hash=tx_hash,
                    receipt=to_json_safe(receipt),
                    msg="Transaction reverted (status=0). Possibly out-of-gas or require() failed",
                )

        return to_json_safe({
            "tx_hash": tx_hash,
            "broadcasted": True,
            "status": status,
            "receipt": receipt,
            "gas_limit_used": final_gas_limit,
            "gas_price_wei": int(tx.get("gasPrice", 0) or 0),
            "ts": datetime.now(UTC).isoformat(),
        })
