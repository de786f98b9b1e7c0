import argparse
import json
import logging
import os
import sys
from pathlib import Path

from pumpwork.adapters.solana_rpc import SolanaBalanceClient
from pumpwork.adapters.sqlite.migrator import SQLiteMigrator
from pumpwork.adapters.sqlite.repos import SQLiteAuthUserRepo, SQLiteCategoryRepo, SQLiteProfileRepo
from pumpwork.app_shell.config import ConfigurationError, validate_ops_rules
from pumpwork.domain.access import TokenThresholds, compute_identity
from pumpwork.domain.display import format_sol, truncate_address
from pumpwork.rules.loader import load_rules
from pumpwork.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

DATA_DIR = Path(os.environ.get("PUMPWORK_DATA_DIR", "./data"))
DB_PATH = str(DATA_DIR / "pumpwork.db")


def get_rules(path: str | None) -> Rules:
    try:
        rules = load_rules(Path(path) if path else None)
        validate_ops_rules(rules, DATA_DIR)
    except (FileNotFoundError, ValueError, ConfigurationError) as e:
        logger.error("Cannot start: %s", e)
        sys.exit(1)
    return rules


def handle_migrate(rules: Rules, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(DB_PATH).run_migrations()
    print(f"Applied {len(applied)} migration(s).")
    for filename in applied:
        print(f"  {filename}")


def handle_categories(rules: Rules, args: argparse.Namespace) -> None:
    for category in SQLiteCategoryRepo(DB_PATH).list_all():
        print(f"{category.slug:<20} {category.name}")


def handle_balance(rules: Rules, args: argparse.Namespace) -> None:
    balance = SolanaBalanceClient.from_rules(rules.tokens).fetch_balance_sync(args.address)
    print(f"{truncate_address(args.address)}: {format_sol(balance)}")


def handle_identity(rules: Rules, args: argparse.Namespace) -> None:
    """Print the identity a wallet soft login would resolve to."""
    profile = SQLiteProfileRepo(DB_PATH).get_by_wallet(args.wallet)
    if profile is None:
        logger.error("No profile registered for wallet %s", args.wallet)
        sys.exit(1)

    live = 0.0
    if args.live:
        live = SolanaBalanceClient.from_rules(rules.tokens).fetch_balance_sync(args.wallet)
    identity = compute_identity(
        None,
        profile,
        local_wallet_address=args.wallet,
        live_token_balance=live,
        thresholds=TokenThresholds.from_rules(rules.tokens.thresholds),
    )
    print(json.dumps(identity.to_dict(), indent=2, default=str))


def handle_set_type(rules: Rules, args: argparse.Namespace) -> None:
    user = SQLiteAuthUserRepo(DB_PATH).get_by_email(args.email)
    if user is None:
        logger.error("User %s not found.", args.email)
        sys.exit(1)
    profile = SQLiteProfileRepo(DB_PATH).update_fields(user.id, {"user_type": args.user_type})
    if profile is None:
        logger.error("User %s has no profile.", args.email)
        sys.exit(1)
    print(f"{profile.nickname} is now {profile.user_type}.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Pumpwork CLI")
    parser.add_argument("--rules", help="Path to rules.yaml (defaults to the bundled file)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("categories", help="List job and service categories")

    balance_parser = subparsers.add_parser("balance", help="Fetch a wallet's token balance")
    balance_parser.add_argument("address", help="Wallet address")

    identity_parser = subparsers.add_parser("identity", help="Resolve a wallet's identity")
    identity_parser.add_argument("--wallet", required=True, help="Wallet address")
    identity_parser.add_argument(
        "--live", action="store_true", help="Use the on-chain balance instead of the stored one"
    )

    type_parser = subparsers.add_parser("set-type", help="Change a user's account type")
    type_parser.add_argument("email", help="Email of the user")
    type_parser.add_argument("user_type", choices=["client", "freelancer", "admin"])

    args = parser.parse_args()
    rules = get_rules(args.rules)

    handlers = {
        "migrate": handle_migrate,
        "categories": handle_categories,
        "balance": handle_balance,
        "identity": handle_identity,
        "set-type": handle_set_type,
    }
    handlers[args.command](rules, args)


if __name__ == "__main__":
    main()
