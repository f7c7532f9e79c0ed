#!/usr/bin/env python3
"""
Convert a base58 private key into a solana-keygen style JSON keypair file
"""
import logging
import sys

import click

from wallet import keypair_from_base58, write_keypair

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("write_keypair")

EXIT_CONVERSION_FAILED = 2


@click.command()
@click.argument('secret')
@click.argument('output_path', type=click.Path(dir_okay=False))
def main(secret, output_path):
    """Write SECRET (base58, 64 bytes) to OUTPUT_PATH and print the public key"""
    try:
        keypair = keypair_from_base58(secret)
        write_keypair(keypair, output_path)
    except Exception as e:
        logger.error(f"Failed to write keypair: {e}")
        sys.exit(EXIT_CONVERSION_FAILED)
    click.echo(str(keypair.pubkey()))


if __name__ == "__main__":
    main()
