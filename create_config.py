#!/usr/bin/env python3
"""
Create a dynamic bonding curve config account.

Reads settings from the environment (see .env.example), prints a summary of
the parameters, submits `create_config` built from the program IDL and prints
the new config address with the transaction signature.
"""
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Union

import click
from dotenv import load_dotenv
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.system_program import ID as SYS_PROGRAM_ID
from solders.transaction import Transaction

from bonding_curve import build_config_parameters, build_summary
from config import Config, ConfigError
from idl import ProgramIdl
from wallet import load_keypair

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("create_config")

CREATE_CONFIG_IX = "create_config"


def load_idl(idl_path: Union[str, Path]) -> ProgramIdl:
    path = Path(idl_path).resolve()
    if not path.is_file():
        raise ConfigError(f"IDL file not found: {path}")
    try:
        idl = ProgramIdl.from_file(path)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read IDL file {path}: {e}")
    # Fail here rather than after connecting if the program has no such instruction
    idl.instruction(CREATE_CONFIG_IX)
    return idl


def build_create_config_instruction(idl: ProgramIdl, config: Config, payer: Keypair,
                                    config_keypair: Keypair, params: Dict) -> Instruction:
    return idl.build_instruction(
        CREATE_CONFIG_IX,
        [params],
        {
            "config": config_keypair.pubkey(),
            "fee_claimer": config.FEE_CLAIMER,
            "leftover_receiver": config.LEFTOVER_RECEIVER,
            "quote_mint": config.QUOTE_MINT,
            "payer": payer.pubkey(),
            "system_program": SYS_PROGRAM_ID,
        },
    )


async def submit_transaction(rpc_url: str, instruction: Instruction, payer: Keypair, signers: List[Keypair]):
    """Sign with the payer plus `signers`, send and wait for confirmation"""
    async with AsyncClient(rpc_url, commitment=Confirmed) as client:
        latest = await client.get_latest_blockhash(commitment=Confirmed)
        blockhash = latest.value.blockhash
        message = Message.new_with_blockhash([instruction], payer.pubkey(), blockhash)
        tx = Transaction([payer, *signers], message, blockhash)

        result = await client.send_transaction(tx, opts=TxOpts(preflight_commitment=Confirmed))
        signature = result.value
        logger.info(f"Sent transaction {signature}, waiting for confirmation")

        confirmation = await client.confirm_transaction(signature, commitment=Confirmed)
        status = confirmation.value[0] if confirmation.value else None
        if status is not None and status.err:
            raise RuntimeError(f"Transaction {signature} failed: {status.err}")
        return signature


def run() -> Dict:
    config = Config()

    # Local inputs are checked before anything touches the network
    payer = load_keypair(config.WALLET)
    idl = load_idl(config.IDL_PATH)
    logger.info(f"Payer {payer.pubkey()}, program {idl.program_id}")

    params = build_config_parameters(config)
    click.echo(json.dumps(build_summary(config, params), indent=2))

    config_keypair = Keypair()
    instruction = build_create_config_instruction(idl, config, payer, config_keypair, params)
    logger.info(f"Submitting create_config to {config.RPC_URL} (config account {config_keypair.pubkey()})")

    signature = asyncio.run(submit_transaction(config.RPC_URL, instruction, payer, [config_keypair]))
    logger.info(f"Config account created: {config_keypair.pubkey()}")
    return {
        "configAddress": str(config_keypair.pubkey()),
        "transactionSignature": str(signature),
        "feeClaimer": str(config.FEE_CLAIMER),
        "leftoverReceiver": str(config.LEFTOVER_RECEIVER),
        "quoteMint": str(config.QUOTE_MINT),
    }


@click.command()
def main():
    """Initialize a bonding curve config account on the dynamic bonding curve program"""
    load_dotenv()
    try:
        result = run()
    except Exception as e:
        logger.error(f"create_config failed: {e}")
        sys.exit(1)
    click.echo(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
