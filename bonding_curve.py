"""
Parameter assembly for the dynamic bonding curve `create_config` instruction.

Field names follow the program IDL. Validation of the values is done on-chain.
"""
from typing import Dict, List

from config import Config

# Base fee: 0.5% flat (numerator over 1e9), no scheduler
CLIFF_FEE_NUMERATOR = 5_000_000

# Q64.64 sqrt prices
SQRT_START_PRICE = 4_295_048_016_000_000
FIRST_CURVE_SQRT_PRICE = 4_295_048_016_000_000_000
FIRST_CURVE_LIQUIDITY = 79_305_979_500_567_546_804_382_630_723

PADDING_LENGTH = 7


def build_curve() -> List[Dict[str, int]]:
    return [
        {
            "sqrt_price": FIRST_CURVE_SQRT_PRICE,
            "liquidity": FIRST_CURVE_LIQUIDITY,
        },
    ]


def build_config_parameters(config: Config) -> Dict:
    """Build the `ConfigParameters` argument from the loaded settings"""
    return {
        "pool_fees": {
            "base_fee": {
                "cliff_fee_numerator": CLIFF_FEE_NUMERATOR,
                "first_factor": 0,
                "second_factor": 0,
                "third_factor": 0,
                "base_fee_mode": 0,
            },
            "dynamic_fee": None,
        },
        "collect_fee_mode": config.COLLECT_FEE_MODE,
        "migration_option": config.MIGRATION_OPTION,
        "activation_type": config.ACTIVATION_TYPE,
        "token_type": config.TOKEN_TYPE,
        "token_decimal": config.TOKEN_DECIMAL,
        "migration_quote_threshold": config.MIGRATION_QUOTE_THRESHOLD,
        "partner_lp_percentage": config.PARTNER_LP_PERCENTAGE,
        "partner_locked_lp_percentage": config.PARTNER_LOCKED_LP_PERCENTAGE,
        "creator_lp_percentage": config.CREATOR_LP_PERCENTAGE,
        "creator_locked_lp_percentage": config.CREATOR_LOCKED_LP_PERCENTAGE,
        "sqrt_start_price": SQRT_START_PRICE,
        "locked_vesting": {
            "amount_per_period": 0,
            "cliff_duration_from_migration_time": 0,
            "frequency": 0,
            "number_of_period": 0,
            "cliff_unlock_amount": 0,
        },
        "migration_fee_option": config.MIGRATION_FEE_OPTION,
        "token_supply": None,
        "creator_trading_fee_percentage": config.CREATOR_TRADING_FEE_PERCENTAGE,
        "token_update_authority": config.TOKEN_UPDATE_AUTHORITY,
        "migration_fee": {
            "fee_percentage": config.MIGRATION_FEE_PERCENTAGE,
            "creator_fee_percentage": config.MIGRATION_CREATOR_FEE_PERCENTAGE,
        },
        "migrated_pool_fee": {
            "pool_fee_bps": config.MIGRATED_POOL_FEE_BPS,
            "collect_fee_mode": config.MIGRATED_POOL_COLLECT_FEE_MODE,
            "dynamic_fee": config.MIGRATED_POOL_DYNAMIC_FEE,
        },
        "padding": [0] * PADDING_LENGTH,
        "curve": build_curve(),
    }


def build_summary(config: Config, params: Dict) -> Dict:
    """Human readable summary printed before the transaction is sent.

    Large integers are rendered as strings so they survive JSON consumers
    that parse numbers as doubles.
    """
    return {
        "quoteMint": str(config.QUOTE_MINT),
        "feeClaimer": str(config.FEE_CLAIMER),
        "leftoverReceiver": str(config.LEFTOVER_RECEIVER),
        "migrationOption": params["migration_option"],
        "migrationFeeOption": params["migration_fee_option"],
        "collectFeeMode": params["collect_fee_mode"],
        "activationType": params["activation_type"],
        "tokenType": params["token_type"],
        "tokenDecimal": params["token_decimal"],
        "migrationQuoteThreshold": str(params["migration_quote_threshold"]),
        "creatorTradingFeePercentage": params["creator_trading_fee_percentage"],
        "curve": [
            {
                "sqrtPrice": str(point["sqrt_price"]),
                "liquidity": str(point["liquidity"]),
            }
            for point in params["curve"]
        ],
    }
