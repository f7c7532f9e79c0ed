import hashlib
import re
import pytest

DBC_PROGRAM_ID = "dbcij3LWUppWqq96dh6gJWwBifmcGfLSB5D4DuSMaqN"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
EVENT_AUTHORITY_SEED = b"__event_authority"
CREATE_CONFIG_DISCRIMINATOR = list(hashlib.sha256(b"global:create_config").digest()[:8])


def _defined(name):
    return {"defined": {"name": name}}


def _struct(name, fields):
    return {
        "name": name,
        "type": {"kind": "struct", "fields": [{"name": n, "type": t} for n, t in fields]},
    }


def dynamic_bonding_curve_idl():
    """Trimmed Anchor 0.31 style IDL for the create_config instruction"""
    return {
        "address": DBC_PROGRAM_ID,
        "metadata": {"name": "dynamic_bonding_curve", "version": "0.1.0", "spec": "0.1.0"},
        "instructions": [
            {
                "name": "create_config",
                "discriminator": CREATE_CONFIG_DISCRIMINATOR,
                "accounts": [
                    {"name": "config", "writable": True, "signer": True},
                    {"name": "fee_claimer"},
                    {"name": "leftover_receiver"},
                    {"name": "quote_mint"},
                    {"name": "payer", "writable": True, "signer": True},
                    {"name": "system_program", "address": SYSTEM_PROGRAM_ID},
                    {"name": "event_authority", "pda": {"seeds": [
                        {"kind": "const", "value": list(EVENT_AUTHORITY_SEED)},
                    ]}},
                    {"name": "program", "address": DBC_PROGRAM_ID},
                ],
                "args": [{"name": "config_parameters", "type": _defined("ConfigParameters")}],
            },
        ],
        "accounts": [
            {"name": "PoolConfig", "discriminator": [26, 108, 14, 123, 116, 230, 129, 43]},
        ],
        "events": [
            {"name": "EvtCreateConfig", "discriminator": [131, 207, 180, 174, 180, 73, 165, 54]},
        ],
        "types": [
            _struct("BaseFeeParameters", [
                ("cliff_fee_numerator", "u64"),
                ("first_factor", "u16"),
                ("second_factor", "u64"),
                ("third_factor", "u64"),
                ("base_fee_mode", "u8"),
            ]),
            _struct("DynamicFeeParameters", [
                ("bin_step", "u16"),
                ("bin_step_u128", "u128"),
                ("filter_period", "u16"),
                ("decay_period", "u16"),
                ("reduction_factor", "u16"),
                ("max_volatility_accumulator", "u32"),
                ("variable_fee_control", "u32"),
            ]),
            _struct("PoolFeeParameters", [
                ("base_fee", _defined("BaseFeeParameters")),
                ("dynamic_fee", {"option": _defined("DynamicFeeParameters")}),
            ]),
            _struct("LockedVestingParams", [
                ("amount_per_period", "u64"),
                ("cliff_duration_from_migration_time", "u64"),
                ("frequency", "u64"),
                ("number_of_period", "u64"),
                ("cliff_unlock_amount", "u64"),
            ]),
            _struct("TokenSupplyParams", [
                ("pre_migration_token_supply", "u64"),
                ("post_migration_token_supply", "u64"),
            ]),
            _struct("MigrationFee", [
                ("fee_percentage", "u8"),
                ("creator_fee_percentage", "u8"),
            ]),
            _struct("MigratedPoolFee", [
                ("pool_fee_bps", "u16"),
                ("collect_fee_mode", "u8"),
                ("dynamic_fee", "u8"),
            ]),
            _struct("LiquidityDistributionParameters", [
                ("sqrt_price", "u128"),
                ("liquidity", "u128"),
            ]),
            _struct("ConfigParameters", [
                ("pool_fees", _defined("PoolFeeParameters")),
                ("collect_fee_mode", "u8"),
                ("migration_option", "u8"),
                ("activation_type", "u8"),
                ("token_type", "u8"),
                ("token_decimal", "u8"),
                ("migration_quote_threshold", "u64"),
                ("partner_lp_percentage", "u8"),
                ("partner_locked_lp_percentage", "u8"),
                ("creator_lp_percentage", "u8"),
                ("creator_locked_lp_percentage", "u8"),
                ("sqrt_start_price", "u128"),
                ("locked_vesting", _defined("LockedVestingParams")),
                ("migration_fee_option", "u8"),
                ("token_supply", {"option": _defined("TokenSupplyParams")}),
                ("creator_trading_fee_percentage", "u8"),
                ("token_update_authority", "u8"),
                ("migration_fee", _defined("MigrationFee")),
                ("migrated_pool_fee", _defined("MigratedPoolFee")),
                ("padding", {"array": ["u64", 7]}),
                ("curve", {"vec": _defined("LiquidityDistributionParameters")}),
            ]),
            _struct("PoolConfig", [
                ("quote_mint", "pubkey"),
                ("fee_claimer", "pubkey"),
            ]),
            _struct("EvtCreateConfig", [
                ("config", "pubkey"),
                ("quote_mint", "pubkey"),
            ]),
        ],
    }


def _camel(name):
    return re.sub(r'_([a-z0-9])', lambda m: m.group(1).upper(), name)


def _legacy_type(idl_type):
    if idl_type == "pubkey":
        return "publicKey"
    if isinstance(idl_type, str):
        return idl_type
    if "defined" in idl_type:
        return {"defined": idl_type["defined"]["name"]}
    if "option" in idl_type:
        return {"option": _legacy_type(idl_type["option"])}
    if "vec" in idl_type:
        return {"vec": _legacy_type(idl_type["vec"])}
    if "array" in idl_type:
        item_type, length = idl_type["array"]
        return {"array": [_legacy_type(item_type), length]}
    raise ValueError(idl_type)


def _legacy_typedef(typedef):
    fields = [{"name": _camel(f["name"]), "type": _legacy_type(f["type"])} for f in typedef["type"]["fields"]]
    return {"name": typedef["name"], "type": {"kind": "struct", "fields": fields}}


def to_legacy_idl(idl):
    """Same program in the pre-0.30 IDL format: camelCase names, isMut/isSigner, no discriminators"""
    account_names = {account["name"] for account in idl["accounts"]}
    event_names = {event["name"] for event in idl["events"]}
    typedefs = {typedef["name"]: typedef for typedef in idl["types"]}
    return {
        "version": idl["metadata"]["version"],
        "name": idl["metadata"]["name"],
        "instructions": [
            {
                "name": _camel(ix["name"]),
                "accounts": [
                    {
                        "name": _camel(account["name"]),
                        "isMut": account.get("writable", False),
                        "isSigner": account.get("signer", False),
                    }
                    for account in ix["accounts"]
                ],
                "args": [{"name": _camel(arg["name"]), "type": _legacy_type(arg["type"])} for arg in ix["args"]],
            }
            for ix in idl["instructions"]
        ],
        "accounts": [_legacy_typedef(typedefs[name]) for name in sorted(account_names)],
        "types": [
            _legacy_typedef(typedef) for name, typedef in typedefs.items()
            if name not in account_names and name not in event_names
        ],
        "metadata": {"address": idl["address"]},
    }


@pytest.fixture
def dbc_idl():
    return dynamic_bonding_curve_idl()


@pytest.fixture
def legacy_dbc_idl():
    return to_legacy_idl(dynamic_bonding_curve_idl())
