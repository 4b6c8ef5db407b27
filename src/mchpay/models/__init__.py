"""mchpay models.

Value objects shared across the package: the merchant credential, the
signature algorithm and sensitivity enums, and protocol constants.
"""

from mchpay.models.base import MchBaseModel
from mchpay.models.credential import Credential
from mchpay.models.enums import Sensitivity, SignType

__all__ = [
    "Credential",
    "MchBaseModel",
    "Sensitivity",
    "SignType",
]
