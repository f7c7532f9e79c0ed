"""
Off-chain admin authorization for privileged bonding curve instructions.

An admin signs (action, user, target, nonce, expiry_slot). The program checks
the signature against its admin list, rejects payloads past `expiry_slot` and
requires the nonce to increase per user.
"""
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

MESSAGE_LENGTH = 1 + 32 + 32 + 8 + 8
U64_MAX = 2 ** 64 - 1


class AuthorizationAction(IntEnum):
    INITIALIZE_POOL = 1
    SWAP = 2


@dataclass
class AuthorizationPayload:
    signature: Signature
    nonce: int
    expiry_slot: int

    def to_dict(self) -> Dict:
        return {
            "signature": list(bytes(self.signature)),
            "nonce": self.nonce,
            "expirySlot": self.expiry_slot,
        }


def _check_u64(name: str, value: int):
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer, got {value}")


def build_message(action: AuthorizationAction, user: Pubkey, target: Pubkey, nonce: int, expiry_slot: int) -> bytes:
    _check_u64("nonce", nonce)
    _check_u64("expiry_slot", expiry_slot)
    message = (
        bytes([int(action)])
        + bytes(user)
        + bytes(target)
        + struct.pack('<QQ', nonce, expiry_slot)
    )
    return message


def sign_authorization(admin: Keypair, action: AuthorizationAction, user: Pubkey, target: Pubkey,
                       nonce: int, expiry_slot: int) -> AuthorizationPayload:
    message = build_message(action, user, target, nonce, expiry_slot)
    return AuthorizationPayload(
        signature=admin.sign_message(message),
        nonce=nonce,
        expiry_slot=expiry_slot,
    )


def verify_authorization(admin: Pubkey, payload: AuthorizationPayload, action: AuthorizationAction,
                         user: Pubkey, target: Pubkey) -> bool:
    """Signature check only; slot expiry and nonce ordering need chain state"""
    message = build_message(action, user, target, payload.nonce, payload.expiry_slot)
    return payload.signature.verify(admin, message)
