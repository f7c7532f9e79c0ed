#!/usr/bin/env python3
"""
Sign an admin authorization payload for initialize-pool or swap
"""
import json
import logging
import os
import sys

import click
from dotenv import load_dotenv
from solders.pubkey import Pubkey

from authorization import AuthorizationAction, sign_authorization
from config import DEFAULT_WALLET_PATH
from wallet import load_keypair

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("sign_authorization")

ACTIONS = {
    "initialize-pool": AuthorizationAction.INITIALIZE_POOL,
    "swap": AuthorizationAction.SWAP,
}


class PubkeyParamType(click.ParamType):
    name = "pubkey"

    def convert(self, value, param, ctx):
        if isinstance(value, Pubkey):
            return value
        try:
            return Pubkey.from_string(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid base58 address", param, ctx)


PUBKEY = PubkeyParamType()


def resolve_admin_keypair_path(explicit_path):
    return explicit_path or os.getenv('ADMIN_WALLET') or os.getenv('WALLET') or str(DEFAULT_WALLET_PATH)


@click.command()
@click.option('--admin-keypair', type=click.Path(dir_okay=False), default=None,
              help='Admin keypair file (defaults to $ADMIN_WALLET, then $WALLET)')
@click.option('--action', type=click.Choice(sorted(ACTIONS)), required=True)
@click.option('--user', type=PUBKEY, required=True, help='Wallet the authorization is issued to')
@click.option('--target', type=PUBKEY, required=True, help='Pool or config the action applies to')
@click.option('--nonce', type=click.IntRange(min=0), required=True)
@click.option('--expiry-slot', type=click.IntRange(min=0), required=True)
def main(admin_keypair, action, user, target, nonce, expiry_slot):
    """Print a signed authorization payload as JSON"""
    load_dotenv()
    try:
        admin = load_keypair(resolve_admin_keypair_path(admin_keypair))
        payload = sign_authorization(admin, ACTIONS[action], user, target, nonce, expiry_slot)
    except Exception as e:
        logger.error(f"Failed to sign authorization: {e}")
        sys.exit(1)

    logger.info(f"Signed {action} authorization for {user} (nonce {nonce}, expires at slot {expiry_slot})")
    result = payload.to_dict()
    result["admin"] = str(admin.pubkey())
    click.echo(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
