"""Utility modules for mchpay.

Nonce generation and URL sanitization helpers shared by the client,
the operation builders and the CLI.
"""

__all__: list[str] = []
