"""Constants for the merchant API.

Field names, the success marker and endpoint URLs shared by the client,
the reply verifier and the operation builders.
"""

# Payload field names
SIGN_FIELD = "sign"
SIGN_TYPE_FIELD = "sign_type"
APPID_FIELD = "appid"
MCH_ID_FIELD = "mch_id"
RETURN_CODE_FIELD = "return_code"
RETURN_MSG_FIELD = "return_msg"

# Literal key appended to the canonical string, mapped to the api key
CANONICAL_SECRET_KEY = "key"

# return_code value for a successful call
RESULT_SUCCESS = "SUCCESS"

API_BASE_URL = "https://api.mch.weixin.qq.com"

# Orders
UNIFIED_ORDER_URL = f"{API_BASE_URL}/pay/unifiedorder"
ORDER_QUERY_URL = f"{API_BASE_URL}/pay/orderquery"
CLOSE_ORDER_URL = f"{API_BASE_URL}/pay/closeorder"

# Refunds
REFUND_APPLY_URL = f"{API_BASE_URL}/secapi/pay/refund"
REFUND_QUERY_URL = f"{API_BASE_URL}/pay/refundquery"

# Subscription (entrust) pay
PAPPAY_APPLY_URL = f"{API_BASE_URL}/pay/pappayapply"
PAPPAY_ORDER_QUERY_URL = f"{API_BASE_URL}/pay/paporderquery"

# Transfers to balance
TRANSFER_TO_BALANCE_URL = f"{API_BASE_URL}/mmpaymkttransfers/promotion/transfers"
TRANSFER_BALANCE_QUERY_URL = f"{API_BASE_URL}/mmpaymkttransfers/gettransferinfo"

# Cash bonus (red packets)
REDPACK_SEND_URL = f"{API_BASE_URL}/mmpaymkttransfers/sendredpack"
REDPACK_QUERY_URL = f"{API_BASE_URL}/mmpaymkttransfers/gethbinfo"

# RSA public key used to encrypt bank card data
RSA_PUBLIC_KEY_URL = "https://fraud.mch.weixin.qq.com/risk/getpublickey"

DEFAULT_TIMEOUT_SECONDS = 30.0
NONCE_SIZE = 16
