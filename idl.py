"""
Minimal Anchor IDL reader and instruction builder.

Handles both the current IDL format (Anchor >= 0.30: top-level `address`,
explicit discriminators, `writable`/`signer`, `pubkey`, `{"defined": {"name": ...}}`)
and the legacy one (`metadata.address`, `isMut`/`isSigner`, `publicKey`,
`{"defined": "Name"}`, discriminators derived from the instruction name).

Arguments are borsh encoded with `construct` layouts generated from the IDL
type definitions. Names are matched in snake_case so callers can use the same
dict keys whatever casing the IDL uses.
"""
import hashlib
import json
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from construct import (
    Adapter,
    Array,
    Bytes,
    BytesInteger,
    ConstructError,
    Flag,
    Float32l,
    Float64l,
    GreedyBytes,
    If,
    Int8sl,
    Int8ul,
    Int16sl,
    Int16ul,
    Int32sl,
    Int32ul,
    Int64sl,
    Int64ul,
    PascalString,
    Pass,
    Prefixed,
    PrefixedArray,
    Sequence,
    Struct,
    Switch,
    this,
)
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

DISCRIMINATOR_LENGTH = 8

PRIMITIVES = {
    "bool": Flag,
    "u8": Int8ul,
    "i8": Int8sl,
    "u16": Int16ul,
    "i16": Int16sl,
    "u32": Int32ul,
    "i32": Int32sl,
    "u64": Int64ul,
    "i64": Int64sl,
    "u128": BytesInteger(16, signed=False, swapped=True),
    "i128": BytesInteger(16, signed=True, swapped=True),
    "f32": Float32l,
    "f64": Float64l,
    "string": PascalString(Int32ul, "utf8"),
    "bytes": Prefixed(Int32ul, GreedyBytes),
}


class IdlError(ValueError):
    """Raised when an IDL is malformed or cannot encode the given values"""


def snake_case(name: str) -> str:
    return re.sub(r'(?<=[a-z0-9])([A-Z])', r'_\1', name).lower()


def sighash(ix_name: str) -> bytes:
    """Anchor's default instruction discriminator"""
    return hashlib.sha256(f"global:{snake_case(ix_name)}".encode()).digest()[:DISCRIMINATOR_LENGTH]


class PubkeyAdapter(Adapter):
    def __init__(self):
        super().__init__(Bytes(32))

    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        if isinstance(obj, str):
            obj = Pubkey.from_string(obj)
        return bytes(obj)


class BorshOption(Adapter):
    """u8 tag followed by the value when the tag is 1"""

    def __init__(self, subcon):
        super().__init__(Struct("tag" / Int8ul, "value" / If(this.tag == 1, subcon)))

    def _decode(self, obj, context, path):
        return obj.value if obj.tag == 1 else None

    def _encode(self, obj, context, path):
        if obj is None:
            return {"tag": 0, "value": None}
        return {"tag": 1, "value": obj}


class BorshEnum(Adapter):
    """u8 variant index followed by the variant fields.

    Accepts a variant index, a variant name, or `{name: fields}`.
    """

    def __init__(self, variants):
        self.variant_names = [snake_case(name) for name, _ in variants]
        cases = {index: layout for index, (_, layout) in enumerate(variants) if layout is not None}
        super().__init__(Struct("index" / Int8ul, "value" / Switch(this.index, cases, default=Pass)))

    def _decode(self, obj, context, path):
        name = self.variant_names[obj.index]
        return {name: obj.value} if obj.value is not None else name

    def _encode(self, obj, context, path):
        if isinstance(obj, int):
            return {"index": obj, "value": None}
        if isinstance(obj, str):
            name, value = obj, None
        else:
            (name, value), = obj.items()
        try:
            index = self.variant_names.index(snake_case(name))
        except ValueError:
            raise IdlError(f"Unknown enum variant {name!r}")
        return {"index": index, "value": value}


class IdlAccount:
    def __init__(self, name: str, writable: bool, signer: bool, optional: bool = False,
                 address: Optional[Pubkey] = None, pda: Optional[Dict] = None):
        self.name = name
        self.writable = writable
        self.signer = signer
        self.optional = optional
        self.address = address
        self.pda = pda


class IdlInstruction:
    def __init__(self, name: str, discriminator: bytes, accounts: List[IdlAccount], args: List[Dict]):
        self.name = name
        self.discriminator = discriminator
        self.accounts = accounts
        self.args = args


class ProgramIdl:
    """Program id, instructions and type layouts read from an IDL document"""

    def __init__(self, raw: Dict):
        if not isinstance(raw, dict):
            raise IdlError("IDL must be a JSON object")
        self.program_id = self._read_program_id(raw)
        self.name = raw.get("name") or (raw.get("metadata") or {}).get("name")

        self._typedefs = {}
        for typedef in raw.get("types", []):
            self._typedefs[typedef["name"]] = typedef
        # Legacy IDLs keep account layouts inline
        for account in raw.get("accounts", []):
            if "type" in account:
                self._typedefs[account["name"]] = account
        self._layouts = {}

        self.instructions = {}
        for ix in raw.get("instructions", []):
            instruction = self._read_instruction(ix)
            self.instructions[instruction.name] = instruction

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ProgramIdl":
        with open(path, 'r') as f:
            return cls(json.load(f))

    @staticmethod
    def _read_program_id(raw: Dict) -> Pubkey:
        address = raw.get("address") or (raw.get("metadata") or {}).get("address")
        if not address:
            raise IdlError("Program ID missing in IDL metadata")
        try:
            return Pubkey.from_string(address)
        except ValueError:
            raise IdlError(f"Program ID in IDL is not a valid address: {address!r}")

    def _read_accounts(self, items: List[Dict]) -> List[IdlAccount]:
        accounts = []
        for item in items:
            if "accounts" in item:
                # Composite account groups are flattened in declaration order
                accounts.extend(self._read_accounts(item["accounts"]))
                continue
            address = item.get("address")
            accounts.append(IdlAccount(
                name=snake_case(item["name"]),
                writable=bool(item.get("writable", item.get("isMut", False))),
                signer=bool(item.get("signer", item.get("isSigner", False))),
                optional=bool(item.get("optional", item.get("isOptional", False))),
                address=Pubkey.from_string(address) if address else None,
                pda=item.get("pda"),
            ))
        return accounts

    def _read_instruction(self, ix: Dict) -> IdlInstruction:
        name = snake_case(ix["name"])
        discriminator = bytes(ix["discriminator"]) if "discriminator" in ix else sighash(name)
        return IdlInstruction(
            name=name,
            discriminator=discriminator,
            accounts=self._read_accounts(ix.get("accounts", [])),
            args=ix.get("args", []),
        )

    def instruction(self, name: str) -> IdlInstruction:
        try:
            return self.instructions[snake_case(name)]
        except KeyError:
            raise IdlError(f"Instruction {name!r} not found in IDL")

    def layout(self, idl_type):
        """construct layout for an IDL type expression"""
        if isinstance(idl_type, str):
            if idl_type in ("pubkey", "publicKey"):
                return PubkeyAdapter()
            if idl_type in PRIMITIVES:
                return PRIMITIVES[idl_type]
            raise IdlError(f"Unsupported IDL type {idl_type!r}")

        if "option" in idl_type:
            return BorshOption(self.layout(idl_type["option"]))
        if "vec" in idl_type:
            return PrefixedArray(Int32ul, self.layout(idl_type["vec"]))
        if "array" in idl_type:
            item_type, length = idl_type["array"]
            if not isinstance(length, int):
                raise IdlError(f"Unsupported array length {length!r}")
            return Array(length, self.layout(item_type))
        if "defined" in idl_type:
            defined = idl_type["defined"]
            return self._defined_layout(defined["name"] if isinstance(defined, dict) else defined)
        raise IdlError(f"Unsupported IDL type {idl_type!r}")

    def _fields_layout(self, fields: List):
        if fields and isinstance(fields[0], dict) and "name" in fields[0]:
            return Struct(*(snake_case(field["name"]) / self.layout(field["type"]) for field in fields))
        return Sequence(*(self.layout(field) for field in fields))

    def _defined_layout(self, name: str):
        if name in self._layouts:
            return self._layouts[name]
        if name not in self._typedefs:
            raise IdlError(f"Type {name!r} not defined in IDL")

        typedef = self._typedefs[name]
        if typedef.get("generics"):
            raise IdlError(f"Generic type {name!r} is not supported")
        body = typedef["type"]
        kind = body.get("kind")
        if kind == "struct":
            layout = self._fields_layout(body.get("fields", []))
        elif kind == "enum":
            variants = []
            for variant in body["variants"]:
                fields = variant.get("fields")
                variants.append((variant["name"], self._fields_layout(fields) if fields else None))
            layout = BorshEnum(variants)
        elif kind == "type":
            layout = self.layout(body["alias"])
        else:
            raise IdlError(f"Unsupported kind {kind!r} for type {name!r}")

        self._layouts[name] = layout
        return layout

    def encode_args(self, instruction: IdlInstruction, args: List) -> bytes:
        if len(args) != len(instruction.args):
            raise IdlError(f"{instruction.name} takes {len(instruction.args)} arguments, got {len(args)}")
        data = instruction.discriminator
        for spec, value in zip(instruction.args, args):
            try:
                data += self.layout(spec["type"]).build(value)
            except IdlError:
                raise
            except (ConstructError, KeyError, TypeError, ValueError) as e:
                raise IdlError(f"Could not encode argument {spec['name']!r} of {instruction.name}: {e!r}")
        return data

    def _resolve_pda(self, account: IdlAccount, resolved: Dict[str, Pubkey]) -> Pubkey:
        seeds = []
        for seed in account.pda.get("seeds", []):
            kind = seed.get("kind")
            if kind == "const":
                value = seed["value"]
                # Legacy IDLs may spell string seeds out as text
                seeds.append(value.encode() if isinstance(value, str) else bytes(value))
            elif kind == "account" and snake_case(seed["path"]) in resolved:
                seeds.append(bytes(resolved[snake_case(seed["path"])]))
            else:
                raise IdlError(f"Cannot derive {account.name}: unsupported seed {seed}")

        program_id = self.program_id
        program = account.pda.get("program")
        if program:
            if program.get("kind") != "const":
                raise IdlError(f"Cannot derive {account.name}: unsupported program seed")
            program_id = Pubkey.from_bytes(bytes(program["value"]))
        return Pubkey.find_program_address(seeds, program_id)[0]

    def build_instruction(self, name: str, args: List, accounts: Dict[str, Pubkey]) -> Instruction:
        """Encode `name` with positional `args`; accounts are keyed by snake_case name.

        Accounts with a fixed address or constant PDA seeds in the IDL are
        filled in when not given. Missing optional accounts use the program id.
        """
        instruction = self.instruction(name)
        resolved = {snake_case(key): value for key, value in accounts.items()}

        for account in instruction.accounts:
            if account.name not in resolved and account.address is not None:
                resolved[account.name] = account.address
        for account in instruction.accounts:
            if account.name not in resolved and account.pda is not None:
                resolved[account.name] = self._resolve_pda(account, resolved)

        metas = []
        for account in instruction.accounts:
            pubkey = resolved.get(account.name)
            if pubkey is None:
                if not account.optional:
                    raise IdlError(f"Missing account {account.name!r} for {instruction.name}")
                pubkey = self.program_id
            metas.append(AccountMeta(pubkey=pubkey, is_signer=account.signer, is_writable=account.writable))

        return Instruction(self.program_id, self.encode_args(instruction, args), metas)
