"""Property-based tests for payload signatures and reply verification."""

from __future__ import annotations

import random
import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mchpay.crypto.canonical import canonical_string
from mchpay.crypto.reply import verify_reply
from mchpay.crypto.signing import sign
from mchpay.errors import SignatureMismatchError
from mchpay.models.credential import Credential
from mchpay.models.enums import SignType
from tests.factories import TEST_API_KEY, TEST_APPID, TEST_MCH_ID

RESERVED_KEYS = {"sign", "sign_type", "appid", "mch_id"}

keys = st.text(alphabet=string.ascii_letters + string.digits + "_", min_size=1, max_size=16).filter(
    lambda k: k not in RESERVED_KEYS
)
values = st.text(min_size=1, max_size=32)
payloads = st.dictionaries(keys, values, max_size=12)
sign_types = st.sampled_from(list(SignType))

CREDENTIAL = Credential(appid=TEST_APPID, mch_id=TEST_MCH_ID, api_key=TEST_API_KEY)


@given(payload=payloads, sign_type=sign_types, seed=st.integers())
def test_signature_independent_of_key_order(
    payload: dict[str, str], sign_type: SignType, seed: int
) -> None:
    items = list(payload.items())
    random.Random(seed).shuffle(items)
    assert sign(dict(items), TEST_API_KEY, sign_type) == sign(payload, TEST_API_KEY, sign_type)


@given(payload=payloads, sign_type=sign_types, existing=st.text(max_size=64))
def test_signature_ignores_sign_entry(
    payload: dict[str, str], sign_type: SignType, existing: str
) -> None:
    with_sign = {**payload, "sign": existing}
    assert sign(with_sign, TEST_API_KEY, sign_type) == sign(payload, TEST_API_KEY, sign_type)


@given(payload=payloads, empty_keys=st.lists(keys, max_size=4))
def test_signature_ignores_empty_values(payload: dict[str, str], empty_keys: list[str]) -> None:
    padded = {**{k: "" for k in empty_keys if k not in payload}, **payload}
    assert sign(padded, TEST_API_KEY) == sign(payload, TEST_API_KEY)


@given(payload=payloads)
def test_canonical_string_ends_with_secret(payload: dict[str, str]) -> None:
    assert canonical_string(payload, TEST_API_KEY).endswith(f"key={TEST_API_KEY}")


@given(payload=payloads, sign_type=sign_types)
def test_signed_reply_verifies(payload: dict[str, str], sign_type: SignType) -> None:
    reply = {**payload, "appid": TEST_APPID, "mch_id": TEST_MCH_ID, "sign_type": sign_type.value}
    reply["sign"] = sign(reply, TEST_API_KEY, sign_type)
    verify_reply(reply, CREDENTIAL)


@given(payload=payloads.filter(bool), data=st.data())
def test_any_value_change_breaks_signature(payload: dict[str, str], data: st.DataObject) -> None:
    reply = dict(payload)
    reply["sign"] = sign(reply, TEST_API_KEY)
    key = data.draw(st.sampled_from(sorted(payload)))
    new_value = data.draw(values.filter(lambda v: v != payload[key]))
    reply[key] = new_value
    with pytest.raises(SignatureMismatchError):
        verify_reply(reply, CREDENTIAL)
