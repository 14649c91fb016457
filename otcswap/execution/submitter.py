"""
State-changing calls against the escrow ledger.

Every operation runs the same pipeline: validate against a fresh read of
the ledger, approve the escrow to pull tokens where value moves, submit
the call, wait for its receipt and pull the result out of the emitted
events.  Each step runs only after the previous one is confirmed and a
failure anywhere aborts the rest; nothing is retried here because an
approve or submit that timed out may still have been applied.
"""
from __future__ import annotations

import time
from typing import Awaitable, Callable, Optional, TypeVar

from ..connectors.ledger import EventLog, LedgerConnector, Signer, TxReceipt
from ..errors import (
    Expired,
    GracePeriodExpired,
    InactiveOrder,
    InsufficientFunds,
    InvalidInput,
    LedgerTransportError,
    NotAuthorized,
    NotFound,
    OTCError,
    ProtocolViolation,
    TransactionReverted,
)
from ..events import (
    ORDER_CANCELED,
    ORDER_CREATED,
    ORDER_FILLED,
    CleanupErrorEvent,
    FeesDistributed,
    OrderCleanedUp,
    OrderRetried,
    as_cleaned_order,
    as_cleanup_failure,
    as_fee_distribution,
    as_retried_order,
    decode_events,
)
from ..models import (
    CancelOrderResult,
    CleanupResult,
    CreateOrderResult,
    FillOrderResult,
    FillParams,
    OrderParams,
    is_zero_address,
    same_address,
)
from ..policy import ExpiryPolicy
from ..utils.logging import get_logger, log_json
from ..utils.monitoring import approvals_counter, transactions_counter
from .submission import Submission, SubmissionState
from .validators import fee_bounds, order_params_violation

logger = get_logger(__name__)

T = TypeVar("T")


class TransactionSubmitter:
    """Run create, fill, cancel and cleanup against ``ledger``.

    Parameters
    ----------
    ledger : LedgerConnector
        Escrow connector used for reads, approvals and submissions.
    policy : ExpiryPolicy
        Source of the lifetime and grace period used in pre-flight checks.
    signer : Signer, optional
        Active wallet. Every operation raises :class:`NotAuthorized`
        without one.
    clock : callable
        Returns the current unix time; injected for tests.
    """

    def __init__(
        self,
        ledger: LedgerConnector,
        policy: ExpiryPolicy,
        signer: Optional[Signer] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ledger = ledger
        self.policy = policy
        self.signer = signer
        self.clock = clock

    # pipeline helpers ----------------------------------------------------
    async def _run(self, sub: Submission, body: Callable[[], Awaitable[T]]) -> T:
        try:
            result = await body()
        except OTCError as exc:
            raise sub.fail(exc)
        except Exception as exc:
            raise sub.fail(LedgerTransportError(repr(exc))) from exc
        sub.advance(SubmissionState.DONE)
        transactions_counter.labels(operation=sub.operation).inc()
        return result

    def _require_signer(self) -> Signer:
        if self.signer is None:
            raise NotAuthorized("no signer connected")
        return self.signer

    @staticmethod
    def _ensure_success(receipt: TxReceipt, what: str) -> None:
        if not receipt.succeeded:
            raise TransactionReverted(f"{what} transaction {receipt.tx_hash} reverted", tx_hash=receipt.tx_hash)

    async def _approve(self, sub: Submission, signer: Signer, token: str, amount: int) -> None:
        sub.advance(SubmissionState.APPROVING)
        tx_hash = await self.ledger.submit_approve(signer, token, self.ledger.address, amount)
        sub.record_tx(tx_hash)
        receipt = await self.ledger.wait_for_receipt(tx_hash)
        self._ensure_success(receipt, "approval")
        approvals_counter.inc()
        log_json(logger, "approval_confirmed", operation=sub.operation, token=token, amount=amount, tx_hash=tx_hash)

    async def _submit(self, sub: Submission, send: Callable[[], Awaitable[str]]) -> TxReceipt:
        sub.advance(SubmissionState.SUBMITTING)
        tx_hash = await send()
        sub.record_tx(tx_hash)
        sub.advance(SubmissionState.CONFIRMING)
        receipt = await self.ledger.wait_for_receipt(tx_hash)
        self._ensure_success(receipt, sub.operation)
        sub.advance(SubmissionState.EXTRACTING_EVENT)
        return receipt

    @staticmethod
    def _single_event(receipt: TxReceipt, name: str, order_id: Optional[int] = None) -> EventLog:
        found = receipt.events(name)
        if order_id is not None:
            found = [log for log in found if int(log.args["orderId"]) == order_id]
        if len(found) != 1:
            raise ProtocolViolation(
                f"expected one {name} event in {receipt.tx_hash}, found {len(found)}"
            )
        return found[0]

    # operations ----------------------------------------------------------
    async def create_order(self, params: OrderParams) -> CreateOrderResult:
        sub = Submission("create_order")

        async def body() -> CreateOrderResult:
            signer = self._require_signer()
            violation = order_params_violation(params)
            if violation:
                raise InvalidInput(violation)
            fee = await self.ledger.order_creation_fee()
            min_fee, max_fee = fee_bounds(fee)
            log_json(logger, "creation_fee", fee=fee, min_fee=min_fee, max_fee=max_fee)

            await self._approve(sub, signer, params.sell_token, params.sell_amount)
            receipt = await self._submit(
                sub,
                lambda: self.ledger.submit_create_order(
                    signer,
                    params.taker,
                    params.sell_token,
                    params.sell_amount,
                    params.buy_token,
                    params.buy_amount,
                    value=fee,
                ),
            )
            event = self._single_event(receipt, ORDER_CREATED)
            result = CreateOrderResult(
                order_id=int(event.args["orderId"]),
                tx_hash=receipt.tx_hash,
                maker=event.args["maker"],
                timestamp=int(event.args["timestamp"]),
                block_number=receipt.block_number,
                fee=int(event.args.get("orderCreationFee", fee)),
            )
            log_json(logger, "order_created", order_id=result.order_id, tx_hash=result.tx_hash, maker=result.maker)
            return result

        return await self._run(sub, body)

    async def fill_order(self, params: FillParams) -> FillOrderResult:
        sub = Submission("fill_order")

        async def body() -> FillOrderResult:
            signer = self._require_signer()
            order = await self.ledger.get_order(params.order_id)
            if order is None:
                raise NotFound(f"order {params.order_id} does not exist")
            if not order.is_active:
                raise InactiveOrder(f"order {params.order_id} is not active")
            info = await self.policy.get_expiry_info()
            if info.is_expired(order.timestamp, self.clock()):
                raise Expired(f"order {params.order_id} has expired")
            if not is_zero_address(order.taker) and not same_address(order.taker, signer.address):
                raise NotAuthorized(f"{signer.address} is not the designated taker of order {params.order_id}")
            balance = await self.ledger.balance_of(params.buy_token, signer.address)
            if balance < params.buy_amount:
                raise InsufficientFunds(
                    f"balance {balance} of {params.buy_token} is below required {params.buy_amount}"
                )

            await self._approve(sub, signer, params.buy_token, params.buy_amount)
            receipt = await self._submit(sub, lambda: self.ledger.submit_fill_order(signer, params.order_id))
            event = self._single_event(receipt, ORDER_FILLED, params.order_id)
            result = FillOrderResult(
                order_id=params.order_id,
                tx_hash=receipt.tx_hash,
                taker=event.args["taker"],
                timestamp=int(event.args["timestamp"]),
                block_number=receipt.block_number,
            )
            log_json(logger, "order_filled", order_id=result.order_id, tx_hash=result.tx_hash, taker=result.taker)
            return result

        return await self._run(sub, body)

    async def cancel_order(self, order_id: int) -> CancelOrderResult:
        sub = Submission("cancel_order")

        async def body() -> CancelOrderResult:
            signer = self._require_signer()
            order = await self.ledger.get_order(order_id)
            if order is None:
                raise NotFound(f"order {order_id} does not exist")
            if not same_address(order.maker, signer.address):
                raise NotAuthorized("only the maker can cancel an order")
            info = await self.policy.get_expiry_info()
            if self.clock() > info.grace_deadline(order.timestamp):
                raise GracePeriodExpired(f"grace period of order {order_id} has expired")

            receipt = await self._submit(sub, lambda: self.ledger.submit_cancel_order(signer, order_id))
            event = self._single_event(receipt, ORDER_CANCELED, order_id)
            result = CancelOrderResult(
                order_id=order_id,
                tx_hash=receipt.tx_hash,
                timestamp=int(event.args["timestamp"]),
                block_number=receipt.block_number,
            )
            log_json(logger, "order_canceled", order_id=order_id, tx_hash=result.tx_hash)
            return result

        return await self._run(sub, body)

    async def cleanup_expired_orders(self) -> CleanupResult:
        sub = Submission("cleanup_expired_orders")

        async def body() -> CleanupResult:
            signer = self._require_signer()
            receipt = await self._submit(sub, lambda: self.ledger.submit_cleanup_expired_orders(signer))
            events = decode_events(receipt.logs)
            cleaned = [as_cleaned_order(e) for e in events if isinstance(e, OrderCleanedUp)]
            errors = [as_cleanup_failure(e) for e in events if isinstance(e, CleanupErrorEvent)]
            retries = [as_retried_order(e) for e in events if isinstance(e, OrderRetried)]
            fees = [as_fee_distribution(e) for e in events if isinstance(e, FeesDistributed)]
            log_json(
                logger,
                "cleanup_done",
                tx_hash=receipt.tx_hash,
                cleaned=len(cleaned),
                errors=len(errors),
                retries=len(retries),
                fee_distributions=len(fees),
            )
            return CleanupResult(
                tx_hash=receipt.tx_hash,
                block_number=receipt.block_number,
                cleaned_orders=cleaned,
                errors=errors,
                retries=retries,
                fees_distributed=fees,
            )

        return await self._run(sub, body)


__all__ = ["TransactionSubmitter"]
