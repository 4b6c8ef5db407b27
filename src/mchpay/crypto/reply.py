"""Verification of gateway replies against the local credential."""

from collections.abc import Mapping

from mchpay.crypto.signing import resolve_sign_type, sign, signatures_equal
from mchpay.errors import IdentityMismatchError, SignatureMismatchError
from mchpay.models.constants import APPID_FIELD, MCH_ID_FIELD, SIGN_FIELD, SIGN_TYPE_FIELD
from mchpay.models.credential import Credential


def verify_reply(reply: Mapping[str, str], credential: Credential) -> None:
    """Check a reply's signature and identity fields.

    Checks run in order and the first failure is raised:

    1. ``sign``, if present, must match the signature recomputed with the
       algorithm named by ``sign_type`` (MD5 when absent). Unsigned replies
       skip this check.
    2. ``appid``, if present, must equal the credential's appid.
    3. ``mch_id``, if present, must equal the credential's mch_id.

    Raises:
        UnsupportedAlgorithmError: Unknown ``sign_type`` value.
        SignatureMismatchError: Signature does not match.
        IdentityMismatchError: appid or mch_id differ from the credential.
    """
    if SIGN_FIELD in reply:
        sign_type = resolve_sign_type(reply.get(SIGN_TYPE_FIELD))
        expected = sign(reply, credential.api_key, sign_type)
        actual = reply[SIGN_FIELD]
        if not signatures_equal(expected, actual):
            raise SignatureMismatchError(expected=expected, actual=actual)

    if APPID_FIELD in reply and reply[APPID_FIELD] != credential.appid:
        raise IdentityMismatchError(APPID_FIELD, credential.appid, reply[APPID_FIELD])

    if MCH_ID_FIELD in reply and reply[MCH_ID_FIELD] != credential.mch_id:
        raise IdentityMismatchError(MCH_ID_FIELD, credential.mch_id, reply[MCH_ID_FIELD])
