import os
from pathlib import Path
from solders.pubkey import Pubkey

PROJECT_ROOT = Path(__file__).resolve().parent

DEFAULT_RPC_URL = "https://api.devnet.solana.com"
DEFAULT_WALLET_PATH = PROJECT_ROOT / "keys" / "devnet" / "deployer.json"
DEFAULT_IDL_PATH = PROJECT_ROOT / "target" / "idl" / "dynamic_bonding_curve.json"
DEFAULT_FEE_CLAIMER = "7iP6tKxvovkSTKggrYVYhkQgHLvT1CqKxop16wbK5jE9"
WSOL_MINT = "So11111111111111111111111111111111111111112"


class ConfigError(ValueError):
    """Raised when an environment setting or input file is unusable"""


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _pubkey_env(name: str, default: str) -> Pubkey:
    raw = os.getenv(name) or default
    try:
        return Pubkey.from_string(raw)
    except ValueError:
        raise ConfigError(f"{name} is not a valid base58 address: {raw!r}")


class Config:
    """Settings for the config-creation script, read from the environment"""

    def __init__(self):
        # Connection and credentials
        self.RPC_URL = os.getenv('RPC_URL') or DEFAULT_RPC_URL
        self.WALLET = Path(os.getenv('WALLET') or DEFAULT_WALLET_PATH)
        self.IDL_PATH = Path(os.getenv('IDL_PATH') or DEFAULT_IDL_PATH)

        # Accounts
        self.FEE_CLAIMER = _pubkey_env('FEE_CLAIMER', DEFAULT_FEE_CLAIMER)
        # Leftover receiver falls back to the fee claimer
        self.LEFTOVER_RECEIVER = _pubkey_env('LEFTOVER_RECEIVER', str(self.FEE_CLAIMER))
        self.QUOTE_MINT = _pubkey_env('QUOTE_MINT', WSOL_MINT)

        # Pool behaviour
        self.MIGRATION_OPTION = _int_env('MIGRATION_OPTION', 1)  # DAMM v2
        self.MIGRATION_FEE_OPTION = _int_env('MIGRATION_FEE_OPTION', 2)  # FixedBps100 (1%)
        self.COLLECT_FEE_MODE = _int_env('COLLECT_FEE_MODE', 1)  # both tokens
        self.ACTIVATION_TYPE = _int_env('ACTIVATION_TYPE', 0)  # slot based
        self.TOKEN_TYPE = _int_env('TOKEN_TYPE', 0)  # SPL token
        self.TOKEN_DECIMAL = _int_env('TOKEN_DECIMAL', 9)
        self.TOKEN_UPDATE_AUTHORITY = _int_env('TOKEN_UPDATE_AUTHORITY', 0)

        # LP split after migration
        self.PARTNER_LP_PERCENTAGE = _int_env('PARTNER_LP_PERCENTAGE', 20)
        self.PARTNER_LOCKED_LP_PERCENTAGE = _int_env('PARTNER_LOCKED_LP_PERCENTAGE', 0)
        self.CREATOR_LP_PERCENTAGE = _int_env('CREATOR_LP_PERCENTAGE', 80)
        self.CREATOR_LOCKED_LP_PERCENTAGE = _int_env('CREATOR_LOCKED_LP_PERCENTAGE', 0)
        self.CREATOR_TRADING_FEE_PERCENTAGE = _int_env('CREATOR_TRADING_FEE_PERCENTAGE', 50)

        # Migration
        self.MIGRATION_QUOTE_THRESHOLD = _int_env('MIGRATION_QUOTE_THRESHOLD', 1_000_000_000)
        self.MIGRATION_FEE_PERCENTAGE = _int_env('MIGRATION_FEE_PERCENTAGE', 0)
        self.MIGRATION_CREATOR_FEE_PERCENTAGE = _int_env('MIGRATION_CREATOR_FEE_PERCENTAGE', 0)
        self.MIGRATED_POOL_FEE_BPS = _int_env('MIGRATED_POOL_FEE_BPS', 0)
        self.MIGRATED_POOL_COLLECT_FEE_MODE = _int_env('MIGRATED_POOL_COLLECT_FEE_MODE', 0)
        self.MIGRATED_POOL_DYNAMIC_FEE = _int_env('MIGRATED_POOL_DYNAMIC_FEE', 0)
