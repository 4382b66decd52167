"""Account addresses and well-known program identities.

Addresses are ``solders`` public keys: 32 raw bytes, shown in base58.
"""

from solders.pubkey import Pubkey

SYSTEM_PROGRAM_ID = Pubkey.default()
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")

__all__ = ["Pubkey", "SYSTEM_PROGRAM_ID", "TOKEN_PROGRAM_ID"]
