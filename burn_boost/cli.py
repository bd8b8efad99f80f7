"""
Command line tool for operating a burn/boost token database.

Examples:
    python -m burn_boost.cli keygen --output authority.pem
    python -m burn_boost.cli init --key authority.pem
    python -m burn_boost.cli transfer --key authority.pem --token <hex> --to <hex> --amount 250000
    python -m burn_boost.cli burn --key holder.pem --token <hex> --amount 1000
    python -m burn_boost.cli status --token <hex>
    python -m burn_boost.cli preview --token <hex> --amount 50000
"""
import argparse
import sys

from burn_boost.boost import tokens_to_base_units, format_token_amount, format_bp
from burn_boost.config import Config
from burn_boost.core import Instruction, INITIALIZE, BURN, TRANSFER
from burn_boost.crypto import (
    ADDRESS_LENGTH, generate_key_pair, serialize_public_key, serialize_private_key,
    load_private_key, public_key_to_address,
)
from burn_boost.db import DB
from burn_boost.errors import BurnBoostError, ValidationError
from burn_boost.monitoring import Monitor
from burn_boost.program import BurnBoostProgram


def parse_address(value: str) -> bytes:
    """Hex token id or holder address from the command line."""
    try:
        address = bytes.fromhex(value)
    except ValueError:
        raise ValidationError(f"Not a hex address: {value!r}") from None
    if len(address) != ADDRESS_LENGTH:
        raise ValidationError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(address)}")
    return address


def load_config(path: str = None) -> Config:
    if path:
        return Config.from_file(path)
    return Config.default()


def open_program(config: Config) -> BurnBoostProgram:
    db = DB(
        config.database.path,
        write_buffer_size=config.database.write_buffer_size,
        max_open_files=config.database.max_open_files,
        compression=config.database.compression,
    )
    monitor = Monitor(
        host=config.monitoring.host,
        port=config.monitoring.port,
        start_server=config.monitoring.enabled,
    )
    return BurnBoostProgram(db=db, monitor=monitor)


def load_signer(key_path: str):
    """Returns (private_key, public_key_pem, address) for a PEM key file."""
    with open(key_path, 'rb') as f:
        private_key = load_private_key(f.read())
    public_key_pem = serialize_public_key(private_key.public_key())
    return private_key, public_key_pem, public_key_to_address(public_key_pem)


def submit_signed(program: BurnBoostProgram, key_path: str, ix_type: str, data: dict):
    private_key, public_key_pem, address = load_signer(key_path)
    ix = Instruction(
        sender_public_key=public_key_pem,
        ix_type=ix_type,
        data=data,
        nonce=program.get_nonce(address),
    )
    ix.sign(private_key)
    return program.submit(ix), address


def cmd_keygen(args, config):
    private_key, public_key = generate_key_pair()
    with open(args.output, 'wb') as f:
        f.write(serialize_private_key(private_key))
    address = public_key_to_address(serialize_public_key(public_key))
    print(f"Saved private key to: {args.output}")
    print(f"  Address: {address.hex()}")


def cmd_sample_config(args, config):
    Config.default().to_file(args.output)
    print(f"Generated sample configuration at: {args.output}")


def cmd_init(args, config, program):
    token = config.token
    if args.token:
        token_id = parse_address(args.token)
    else:
        # A fresh key pair gives the mint a unique address
        _, mint_key = generate_key_pair()
        token_id = public_key_to_address(serialize_public_key(mint_key))

    state, authority = submit_signed(program, args.key, INITIALIZE, {
        'token_id': token_id,
        'name': args.name or token.name,
        'symbol': args.symbol or token.symbol,
        'decimals': token.decimals,
        'initial_supply': token.initial_supply,
        'base_market_cap': token.base_market_cap,
    })
    print("Token initialized successfully!")
    print(f"  - Token: {token_id.hex()}")
    print(f"  - Name: {state.name} ({state.symbol})")
    print(f"  - Initial Supply: {format_token_amount(state.initial_supply, state.decimals)}")
    print(f"  - Authority: {authority.hex()}")


def cmd_transfer(args, config, program):
    token_id = parse_address(args.token)
    state = program.get_token_state(token_id)
    amount = tokens_to_base_units(args.amount, state.decimals)
    submit_signed(program, args.key, TRANSFER, {
        'token_id': token_id,
        'to': parse_address(args.to),
        'amount': amount,
    })
    print(f"Transferred {format_token_amount(amount, state.decimals)} {state.symbol} to {args.to}")


def cmd_burn(args, config, program):
    token_id = parse_address(args.token)
    before = program.get_token_state(token_id)
    amount = tokens_to_base_units(args.amount, before.decimals)
    after, holder = submit_signed(program, args.key, BURN, {
        'token_id': token_id,
        'amount': amount,
    })
    print(f"Burned {format_token_amount(amount, after.decimals)} {after.symbol}")
    print(f"  - Total Burned: {format_token_amount(after.total_burned, after.decimals)}")
    print(f"  - Multiplier: {before.current_boost_multiplier}bp -> {after.current_boost_multiplier}bp")
    print(f"  - Your Total Burned: "
          f"{format_token_amount(program.get_user_burned(token_id, holder), after.decimals)}")


def cmd_status(args, config, program):
    token_id = parse_address(args.token)
    state = program.get_token_state(token_id)
    stats = program.get_stats(token_id)
    decimals = state.decimals

    print(f"{state.name} ({state.symbol}) status report")
    print(f"  Token: {token_id.hex()}")
    print(f"  Initial Supply: {format_token_amount(stats.initial_supply, decimals)}")
    print(f"  Current Supply: {format_token_amount(stats.current_supply, decimals)}")
    print(f"  Total Burned: {format_token_amount(stats.total_burned, decimals)}")
    print(f"  Burned: {format_bp(stats.burned_percentage)}")
    print(f"  Remaining: {format_bp(program.get_remaining_supply_percentage(token_id))}")
    print(f"  Market Cap Boost: +{format_bp(stats.boost_percentage)}")
    print(f"  Current Market Cap: {stats.current_market_cap:,}")
    print(f"  Burn Transactions: {stats.burn_transaction_count}")

    top = program.top_burners(token_id, limit=args.top)
    if top:
        print("  Top Burners:")
        for entry in top:
            print(f"    {entry.holder.hex()}: {format_token_amount(entry.burned_amount, decimals)}")

    if args.holder:
        holder = parse_address(args.holder)
        print(f"  Holder {args.holder}:")
        print(f"    Balance: {format_token_amount(program.balance_of(token_id, holder), decimals)}")
        print(f"    Burned: {format_token_amount(program.get_user_burned(token_id, holder), decimals)}")


def cmd_preview(args, config, program):
    token_id = parse_address(args.token)
    state = program.get_token_state(token_id)
    amount = tokens_to_base_units(args.amount, state.decimals)
    result = program.preview_boost(token_id, amount)
    print(f"Burning {format_token_amount(amount, state.decimals)} {state.symbol} now would give:")
    print(f"  Burned: {format_bp(result.burned_percentage)}")
    print(f"  Boost: +{format_bp(result.boost_bp)}")
    print(f"  Multiplier: {result.multiplier_bp}bp")


def cmd_projections(args, config, program):
    token_id = parse_address(args.token)
    state = program.get_token_state(token_id)
    print("Burn impact projections:")
    for projection in program.project_burn_impact(token_id, args.percentages):
        print(f"  {projection.percentage}% more burned "
              f"({format_token_amount(projection.additional_burn, state.decimals)}): "
              f"boost +{format_bp(projection.preview.boost_bp)}, "
              f"market cap {projection.projected_market_cap:,}")


PROGRAM_COMMANDS = {
    'init': cmd_init,
    'transfer': cmd_transfer,
    'burn': cmd_burn,
    'status': cmd_status,
    'preview': cmd_preview,
    'projections': cmd_projections,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Burn/boost token tool")
    parser.add_argument("--config", type=str, help="Path to JSON configuration file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("keygen", help="Generate a signing key")
    p.add_argument("--output", type=str, required=True, help="Private key output path")

    p = subparsers.add_parser("sample-config", help="Write a default configuration file")
    p.add_argument("--output", type=str, default="burn_boost.json", help="Output file path")

    p = subparsers.add_parser("init", help="Initialize a token and mint its supply")
    p.add_argument("--key", type=str, required=True, help="Authority private key (PEM)")
    p.add_argument("--token", type=str, help="Token id (hex); generated if omitted")
    p.add_argument("--name", type=str, help="Token name (defaults to config)")
    p.add_argument("--symbol", type=str, help="Token symbol (defaults to config)")

    p = subparsers.add_parser("transfer", help="Transfer tokens to another holder")
    p.add_argument("--key", type=str, required=True, help="Sender private key (PEM)")
    p.add_argument("--token", type=str, required=True)
    p.add_argument("--to", type=str, required=True, help="Recipient address (hex)")
    p.add_argument("--amount", type=str, required=True, help="Amount in whole tokens")

    p = subparsers.add_parser("burn", help="Burn tokens")
    p.add_argument("--key", type=str, required=True, help="Holder private key (PEM)")
    p.add_argument("--token", type=str, required=True)
    p.add_argument("--amount", type=str, required=True, help="Amount in whole tokens")

    p = subparsers.add_parser("status", help="Show token statistics")
    p.add_argument("--token", type=str, required=True)
    p.add_argument("--holder", type=str, help="Also show this holder (hex)")
    p.add_argument("--top", type=int, default=5, help="Number of top burners to list")

    p = subparsers.add_parser("preview", help="Preview the boost of a hypothetical burn")
    p.add_argument("--token", type=str, required=True)
    p.add_argument("--amount", type=str, required=True, help="Amount in whole tokens")

    p = subparsers.add_parser("projections", help="Project burning a share of the current supply")
    p.add_argument("--token", type=str, required=True)
    p.add_argument("--percentages", type=int, nargs="+", default=[10, 25, 50])

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    if args.command == "keygen":
        cmd_keygen(args, config)
        return 0
    if args.command == "sample-config":
        cmd_sample_config(args, config)
        return 0

    program = open_program(config)
    try:
        PROGRAM_COMMANDS[args.command](args, config, program)
    except BurnBoostError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        program.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
