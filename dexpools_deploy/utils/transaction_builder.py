"""
Transaction builder for the deployment toolkit

This module builds, signs and sends transactions for a single signer
account. Deploy scripts are sequential: each transaction is awaited until
its receipt is available before the next one is built.

Design Notes:
- Supports both EIP-1559 and legacy fee fields; anything not set is filled
  in by web3 from the node
- Uses run_in_executor for synchronous Web3 calls to avoid blocking
- No retries: a failed submission surfaces as TransactionError
"""

import asyncio
import functools
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Tuple, TypeVar

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.types import TxParams, TxReceipt, Wei

from .exceptions import ErrorCodes, TransactionError

LOG = logging.getLogger(__name__)

T = TypeVar('T')

# Shared thread pool for Web3 sync calls
_web3_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="web3_sync_")


async def run_sync(func: Callable[..., T], *args, **kwargs) -> T:
    """
    Run a synchronous function in a thread pool to avoid blocking the event loop.

    Args:
        func: Synchronous function to run
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func
    """
    loop = asyncio.get_running_loop()
    partial_func = functools.partial(func, *args, **kwargs)
    return await loop.run_in_executor(_web3_executor, partial_func)


@dataclass
class TransactionOptions:
    """Options for transaction construction"""
    gas_limit: Optional[int] = None
    max_fee_per_gas: Optional[int] = None  # For EIP-1559
    max_priority_fee_per_gas: Optional[int] = None  # For EIP-1559
    gas_price: Optional[int] = None  # For legacy transactions
    nonce: Optional[int] = None
    value: int = 0

    def merged_with(self, other: Optional["TransactionOptions"]) -> "TransactionOptions":
        """Return these options overridden by the fields set in other"""
        if other is None:
            return self
        return TransactionOptions(
            gas_limit=other.gas_limit or self.gas_limit,
            max_fee_per_gas=other.max_fee_per_gas or self.max_fee_per_gas,
            max_priority_fee_per_gas=other.max_priority_fee_per_gas or self.max_priority_fee_per_gas,
            gas_price=other.gas_price or self.gas_price,
            nonce=other.nonce if other.nonce is not None else self.nonce,
            value=other.value or self.value
        )


@dataclass
class TransactionResult:
    """Result of a transaction"""
    tx_hash: str
    tx_receipt: Optional[TxReceipt] = None
    success: bool = False
    error: Optional[str] = None
    gas_used: Optional[int] = None
    block_number: Optional[int] = None
    timestamp: Optional[datetime] = None


class TransactionBuilder:
    """
    Builds, signs and sends transactions for one account.
    """

    def __init__(
        self,
        web3: Web3,
        account: LocalAccount,
        default_options: Optional[TransactionOptions] = None,
        timeout: float = 120.0,
        poll_latency: float = 1.0
    ):
        """
        Initialize transaction builder.

        Args:
            web3: Web3 instance for blockchain interaction
            account: Account to sign transactions with
            default_options: Default transaction options
            timeout: Default receipt timeout in seconds
            poll_latency: Receipt polling interval in seconds
        """
        self.web3 = web3
        self.account = account
        self.default_options = default_options or TransactionOptions()
        self.timeout = timeout
        self.poll_latency = poll_latency

    async def get_nonce(self) -> int:
        """Get the next nonce for the account, counting pending transactions"""
        address = self.account.address
        try:
            return await run_sync(
                self.web3.eth.get_transaction_count,
                address,
                'pending'
            )
        except Exception as e:
            raise TransactionError(
                f"Failed to get nonce for {address}",
                from_address=address,
                cause=e
            )

    async def base_transaction(self, options: Optional[TransactionOptions] = None) -> TxParams:
        """
        Build the sender-side fields shared by every transaction.

        Args:
            options: Transaction options to override defaults

        Returns:
            Partial transaction dictionary (from, nonce, value, chainId, gas fields)
        """
        opts = self.default_options.merged_with(options)

        tx: TxParams = {
            'from': self.account.address,
            'value': Wei(opts.value),
        }

        if opts.nonce is not None:
            tx['nonce'] = opts.nonce
        else:
            tx['nonce'] = await self.get_nonce()

        tx['chainId'] = await run_sync(lambda: self.web3.eth.chain_id)

        if opts.gas_limit:
            tx['gas'] = opts.gas_limit

        if opts.max_fee_per_gas or opts.max_priority_fee_per_gas:
            # EIP-1559 transaction
            if opts.max_fee_per_gas:
                tx['maxFeePerGas'] = Wei(opts.max_fee_per_gas)
            if opts.max_priority_fee_per_gas:
                tx['maxPriorityFeePerGas'] = Wei(opts.max_priority_fee_per_gas)
        elif opts.gas_price:
            # Legacy transaction
            tx['gasPrice'] = Wei(opts.gas_price)

        return tx

    async def build_function_transaction(
        self,
        call: Any,
        options: Optional[TransactionOptions] = None
    ) -> TxParams:
        """
        Build a transaction for a contract function call.

        Args:
            call: Bound contract function, e.g. ``contract.functions.transferOwnership(owner)``
            options: Transaction options

        Returns:
            Complete transaction dictionary
        """
        base = await self.base_transaction(options)
        try:
            return await run_sync(call.build_transaction, base)
        except Exception as e:
            raise TransactionError(
                f"Failed to build transaction for {_call_name(call)}: {e}",
                from_address=self.account.address,
                to_address=getattr(call, 'address', None),
                label=_call_name(call),
                cause=e
            )

    def sign_transaction(self, transaction: TxParams) -> Tuple[str, bytes]:
        """
        Sign a transaction with the account's private key.

        Args:
            transaction: Transaction to sign

        Returns:
            Tuple of (raw transaction hex, signed transaction bytes)
        """
        if 'from' in transaction and transaction['from'] != self.account.address:
            raise TransactionError(
                f"Transaction from address {transaction['from']} does not match account address {self.account.address}",
                from_address=transaction['from'],
                code=ErrorCodes.SIGNING_FAILED
            )

        try:
            signed_tx = self.account.sign_transaction(transaction)
        except Exception as e:
            raise TransactionError(
                f"Failed to sign transaction: {e}",
                from_address=self.account.address,
                code=ErrorCodes.SIGNING_FAILED,
                cause=e
            )

        # Support both old and new eth-account API
        raw_tx = getattr(signed_tx, 'raw_transaction', None) or getattr(signed_tx, 'rawTransaction', None)
        return Web3.to_hex(raw_tx), bytes(raw_tx)

    async def send_transaction(
        self,
        transaction: TxParams,
        wait_for_receipt: bool = True,
        timeout: Optional[float] = None,
        poll_latency: Optional[float] = None
    ) -> TransactionResult:
        """
        Send a transaction to the blockchain.

        Args:
            transaction: Transaction to send
            wait_for_receipt: Whether to wait for transaction receipt
            timeout: Timeout for waiting for receipt
            poll_latency: Polling interval for receipt

        Returns:
            TransactionResult with receipt information
        """
        raw_tx_hex, _ = self.sign_transaction(transaction)

        try:
            tx_hash = await run_sync(self.web3.eth.send_raw_transaction, raw_tx_hex)
        except Exception as e:
            raise TransactionError(
                f"Failed to send transaction: {e}",
                from_address=self.account.address,
                to_address=transaction.get('to'),
                cause=e
            )

        tx_hash_hex = Web3.to_hex(tx_hash)
        result = TransactionResult(tx_hash=tx_hash_hex, timestamp=datetime.now())

        if not wait_for_receipt:
            return result

        LOG.debug(f"Waiting for transaction receipt: {tx_hash_hex}")
        receipt = await self._wait_for_receipt(
            tx_hash,
            timeout=self.timeout if timeout is None else timeout,
            poll_latency=self.poll_latency if poll_latency is None else poll_latency
        )

        result.tx_receipt = receipt
        result.success = receipt['status'] == 1
        result.gas_used = receipt.get('gasUsed')
        result.block_number = receipt.get('blockNumber')

        if not result.success:
            result.error = f"Transaction reverted: {tx_hash_hex}"
            LOG.error(result.error)

        return result

    async def _wait_for_receipt(
        self,
        tx_hash,
        timeout: float,
        poll_latency: float
    ) -> TxReceipt:
        """Poll for a transaction receipt until timeout"""
        start_time = time.time()
        tx_hash_hex = Web3.to_hex(tx_hash)

        while True:
            try:
                receipt = await run_sync(self.web3.eth.get_transaction_receipt, tx_hash)
                if receipt is not None:
                    return receipt
            except TransactionNotFound:
                # Not mined yet
                pass
            except Exception as e:
                raise TransactionError(
                    f"Failed to fetch receipt: {e}",
                    tx_hash=tx_hash_hex,
                    cause=e
                )

            if time.time() - start_time > timeout:
                raise TransactionError(
                    f"Transaction receipt timeout after {timeout}s",
                    tx_hash=tx_hash_hex,
                    code=ErrorCodes.TRANSACTION_TIMEOUT
                )

            await asyncio.sleep(poll_latency)


def _call_name(call: Any) -> str:
    return getattr(call, 'fn_name', None) or type(call).__name__
