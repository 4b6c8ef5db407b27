"""Merchant credential held by every client."""

from pydantic import Field

from mchpay.models.base import MchBaseModel


class Credential(MchBaseModel):
    """Merchant identity and signing secret.

    ``api_key`` is only ever used locally as the signing secret: it is
    excluded from ``repr`` and from serialized dumps.

    Example:
        >>> cred = Credential(appid="wx2421b1c4370ec43b", mch_id="10000100", api_key="s3cr3t")
        >>> "s3cr3t" in repr(cred)
        False
    """

    appid: str = Field(..., min_length=1, description="Application ID bound to the merchant.")
    mch_id: str = Field(..., min_length=1, description="Merchant ID; also unlocks the PKCS#12 bundle.")
    api_key: str = Field(
        ...,
        min_length=1,
        repr=False,
        exclude=True,
        description="Signing secret; never transmitted.",
    )
