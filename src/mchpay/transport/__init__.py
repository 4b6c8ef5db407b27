"""HTTP/XML transport for the merchant API.

Public exports:
    HTTPTransport: httpx-backed transport posting flat XML payloads
    Transport: Protocol implemented by transport handles
    create_ssl_context: server-only or mutual-TLS SSL context
    encode_xml / decode_xml: flat XML codec
"""

from mchpay.transport.client import HTTPTransport, Transport
from mchpay.transport.mtls import create_ssl_context
from mchpay.transport.xml import XMLDecodeError, decode_xml, encode_xml

__all__ = [
    "HTTPTransport",
    "Transport",
    "XMLDecodeError",
    "create_ssl_context",
    "decode_xml",
    "encode_xml",
]
