"""Per-operation request builders.

Each builder is a small value object holding the merchant credential and
the client's ``call`` function. It turns typed parameters into the flat
payload the gateway expects and picks the transport sensitivity; signing
and reply verification happen in :meth:`mchpay.client.MchClient.call`.

Obtain builders from the client rather than constructing them::

    reply = client.order().unify(UnifiedOrderParams(...))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from pydantic import Field, model_validator

from mchpay.models.base import MchBaseModel
from mchpay.models.constants import (
    CLOSE_ORDER_URL,
    NONCE_SIZE,
    ORDER_QUERY_URL,
    PAPPAY_APPLY_URL,
    PAPPAY_ORDER_QUERY_URL,
    REDPACK_QUERY_URL,
    REDPACK_SEND_URL,
    REFUND_APPLY_URL,
    REFUND_QUERY_URL,
    TRANSFER_BALANCE_QUERY_URL,
    TRANSFER_TO_BALANCE_URL,
    UNIFIED_ORDER_URL,
)
from mchpay.models.credential import Credential
from mchpay.models.enums import SignType
from mchpay.utils.nonce import generate_nonce

CallFn = Callable[[str, dict[str, str], bool], dict[str, str]]


def build_payload(*sources: dict[str, object | None]) -> dict[str, str]:
    """Merge sources into a flat string payload, dropping None and empty values."""
    payload: dict[str, str] = {}
    for source in sources:
        for key, value in source.items():
            if value is None or value == "":
                continue
            if isinstance(value, SignType):
                value = value.value
            payload[key] = str(value)
    return payload


class UnifiedOrderParams(MchBaseModel):
    body: str = Field(..., min_length=1)
    out_trade_no: str = Field(..., min_length=1, max_length=32)
    total_fee: int = Field(..., gt=0, description="Amount in the smallest currency unit")
    spbill_create_ip: str
    notify_url: str
    trade_type: str = Field(..., description="JSAPI, NATIVE, APP or MWEB")
    device_info: str | None = None
    detail: str | None = None
    attach: str | None = None
    fee_type: str | None = None
    time_start: str | None = None
    time_expire: str | None = None
    goods_tag: str | None = None
    product_id: str | None = None
    limit_pay: str | None = None
    openid: str | None = None
    receipt: str | None = None
    scene_info: str | None = None


class RefundParams(MchBaseModel):
    out_refund_no: str = Field(..., min_length=1, max_length=64)
    total_fee: int = Field(..., gt=0)
    refund_fee: int = Field(..., gt=0)
    transaction_id: str | None = None
    out_trade_no: str | None = None
    refund_fee_type: str | None = None
    refund_desc: str | None = None
    refund_account: str | None = None
    notify_url: str | None = None

    @model_validator(mode="after")
    def _check_order_reference(self) -> "RefundParams":
        if not (self.transaction_id or self.out_trade_no):
            raise ValueError("transaction_id or out_trade_no is required")
        if self.refund_fee > self.total_fee:
            raise ValueError("refund_fee cannot exceed total_fee")
        return self


class PappayApplyParams(MchBaseModel):
    body: str = Field(..., min_length=1)
    out_trade_no: str = Field(..., min_length=1, max_length=32)
    total_fee: int = Field(..., gt=0)
    spbill_create_ip: str
    notify_url: str
    contract_id: str = Field(..., min_length=1)
    detail: str | None = None
    attach: str | None = None
    fee_type: str | None = None
    goods_tag: str | None = None
    receipt: str | None = None


class TransferParams(MchBaseModel):
    partner_trade_no: str = Field(..., min_length=1, max_length=32)
    openid: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0)
    desc: str = Field(..., min_length=1)
    spbill_create_ip: str
    check_name: str = Field(default="NO_CHECK", pattern=r"^(NO_CHECK|FORCE_CHECK)$")
    re_user_name: str | None = None
    device_info: str | None = None

    @model_validator(mode="after")
    def _check_user_name(self) -> "TransferParams":
        if self.check_name == "FORCE_CHECK" and not self.re_user_name:
            raise ValueError("re_user_name is required when check_name is FORCE_CHECK")
        return self


class RedpackParams(MchBaseModel):
    mch_billno: str = Field(..., min_length=1, max_length=28)
    send_name: str = Field(..., min_length=1)
    re_openid: str = Field(..., min_length=1)
    total_amount: int = Field(..., gt=0)
    total_num: int = Field(default=1, ge=1)
    wishing: str
    client_ip: str
    act_name: str
    remark: str
    scene_id: str | None = None
    risk_info: str | None = None


def _one_of(**refs: str | None) -> dict[str, str | None]:
    given = {k: v for k, v in refs.items() if v}
    if not given:
        raise ValueError(f"one of {', '.join(refs)} is required")
    return dict(given)


@dataclass(frozen=True)
class _Operation:
    credential: Credential
    call: CallFn
    sign_type: SignType = SignType.MD5

    def _order_base(self) -> dict[str, object | None]:
        return {
            "appid": self.credential.appid,
            "mch_id": self.credential.mch_id,
            "nonce_str": generate_nonce(NONCE_SIZE),
            "sign_type": self.sign_type,
        }


class Order(_Operation):
    """Order creation, query and closing (standard transport)."""

    def unify(self, params: UnifiedOrderParams) -> dict[str, str]:
        payload = build_payload(self._order_base(), params.model_dump())
        return self.call(UNIFIED_ORDER_URL, payload, False)

    def query(
        self, *, transaction_id: str | None = None, out_trade_no: str | None = None
    ) -> dict[str, str]:
        ref = _one_of(transaction_id=transaction_id, out_trade_no=out_trade_no)
        return self.call(ORDER_QUERY_URL, build_payload(self._order_base(), ref), False)

    def close(self, out_trade_no: str) -> dict[str, str]:
        payload = build_payload(self._order_base(), {"out_trade_no": out_trade_no})
        return self.call(CLOSE_ORDER_URL, payload, False)


class Refund(_Operation):
    """Refund application (mutual TLS) and query (standard transport)."""

    def create(self, params: RefundParams) -> dict[str, str]:
        payload = build_payload(self._order_base(), params.model_dump())
        return self.call(REFUND_APPLY_URL, payload, True)

    def query(
        self,
        *,
        transaction_id: str | None = None,
        out_trade_no: str | None = None,
        out_refund_no: str | None = None,
        refund_id: str | None = None,
        offset: int | None = None,
    ) -> dict[str, str]:
        ref = _one_of(
            transaction_id=transaction_id,
            out_trade_no=out_trade_no,
            out_refund_no=out_refund_no,
            refund_id=refund_id,
        )
        payload = build_payload(self._order_base(), ref, {"offset": offset})
        return self.call(REFUND_QUERY_URL, payload, False)


class Pappay(_Operation):
    """Deductions under a signed subscription contract (standard transport)."""

    def apply(self, params: PappayApplyParams) -> dict[str, str]:
        payload = build_payload(self._order_base(), params.model_dump(), {"trade_type": "PAP"})
        return self.call(PAPPAY_APPLY_URL, payload, False)

    def query_order(
        self, *, transaction_id: str | None = None, out_trade_no: str | None = None
    ) -> dict[str, str]:
        ref = _one_of(transaction_id=transaction_id, out_trade_no=out_trade_no)
        return self.call(PAPPAY_ORDER_QUERY_URL, build_payload(self._order_base(), ref), False)


class Transfer(_Operation):
    """Transfers to a user's balance (mutual TLS; MD5 only)."""

    def to_balance(self, params: TransferParams) -> dict[str, str]:
        base = {
            "mch_appid": self.credential.appid,
            "mchid": self.credential.mch_id,
            "nonce_str": generate_nonce(NONCE_SIZE),
        }
        return self.call(TRANSFER_TO_BALANCE_URL, build_payload(base, params.model_dump()), True)

    def query(self, partner_trade_no: str) -> dict[str, str]:
        payload = build_payload(
            {
                "appid": self.credential.appid,
                "mch_id": self.credential.mch_id,
                "nonce_str": generate_nonce(NONCE_SIZE),
                "partner_trade_no": partner_trade_no,
            }
        )
        return self.call(TRANSFER_BALANCE_QUERY_URL, payload, True)


class Redpack(_Operation):
    """Cash bonus sending and query (mutual TLS; MD5 only)."""

    def send(self, params: RedpackParams) -> dict[str, str]:
        base = {
            "wxappid": self.credential.appid,
            "mch_id": self.credential.mch_id,
            "nonce_str": generate_nonce(NONCE_SIZE),
        }
        return self.call(REDPACK_SEND_URL, build_payload(base, params.model_dump()), True)

    def query(self, mch_billno: str) -> dict[str, str]:
        payload = build_payload(
            {
                "appid": self.credential.appid,
                "mch_id": self.credential.mch_id,
                "nonce_str": generate_nonce(NONCE_SIZE),
                "mch_billno": mch_billno,
                "bill_type": "MCHT",
            }
        )
        return self.call(REDPACK_QUERY_URL, payload, True)
