"""
credstore - Command Line

    credstore register alice
    credstore add alice github alice-gh             # prompts for the password
    credstore add alice gitlab alice-gl --generate 20
    credstore get alice github [--copy]
    credstore list alice
    credstore delete alice github
    credstore generate --length 24

Global options: --dir DIR, --protect (hardened mode), --verbose.
Master and service passwords are always read with getpass.
"""

import argparse
import getpass
import os
import sys
from typing import List, Optional

from . import __version__, config, crypto
from .errors import CredentialStoreError
from .logging_config import setup_logging
from .vault import Vault

DEFAULT_VAULT_DIR = os.path.join(os.path.expanduser("~"), ".credstore")


def format_table(rows) -> str:
    """Render (service, username, password) rows as a fixed-width table."""
    rows = list(rows)
    if not rows:
        return "No passwords stored."
    lines = [
        f"{'Service':<20}{'Username':<20}Password",
        "-" * 47,
    ]
    for service, username, password in rows:
        lines.append(f"{service:<20}{username:<20}{password}")
    return "\n".join(lines)


def open_vault(args) -> Vault:
    os.makedirs(args.dir, exist_ok=True)
    vault = Vault(args.user, directory=args.dir, protect_at_rest=args.protect)
    password = getpass.getpass("Master password: ")
    if not vault.unlock(password):
        raise CredentialStoreError("Invalid username or master password.")
    return vault


# =============================================================================
# Commands
# =============================================================================

def cmd_register(args) -> int:
    os.makedirs(args.dir, exist_ok=True)
    pw = getpass.getpass("Choose master password: ")
    pw2 = getpass.getpass("Confirm: ")
    if pw != pw2:
        print("Passwords don't match.")
        return 1
    Vault(args.user, directory=args.dir, protect_at_rest=args.protect).register(pw)
    print(f"\n✓ Registered {args.user}.")
    return 0


def cmd_add(args) -> int:
    vault = open_vault(args)
    if args.generate is not None:
        pw = vault.add_generated(args.service, args.login, args.generate)
        print(f"\nGenerated: {pw}")
    else:
        secret = getpass.getpass(f"Password for {args.service}: ")
        vault.add(args.service, args.login, secret)
    print(f"\n✓ Added {args.service}.")
    return 0


def cmd_get(args) -> int:
    vault = open_vault(args)
    payload = vault.get(args.service)
    if payload is None:
        print(f"No password stored for {args.service}.")
        return 1

    login, _, secret = payload.partition(config.PAYLOAD_SEPARATOR)
    print(f"\n  Service: {args.service}")
    print(f"  Username: {login}")
    if args.copy:
        import pyperclip
        pyperclip.copy(secret)
        print("✓ Password copied to clipboard!")
    else:
        print(f"  Password: {secret}")
    return 0


def cmd_list(args) -> int:
    vault = open_vault(args)
    print(format_table(vault.list_all()))
    return 0


def cmd_delete(args) -> int:
    vault = open_vault(args)
    removed = vault.delete(args.service)
    print(f"\n✓ Deleted {removed} entr{'y' if removed == 1 else 'ies'} for {args.service}.")
    return 0


def cmd_generate(args) -> int:
    print(crypto.generate_password(args.length))
    return 0


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="credstore", description="Local credential store")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--dir", default=DEFAULT_VAULT_DIR, help="vault directory")
    parser.add_argument("--protect", action="store_true",
                        help="hash the master password and encrypt the credential file")
    parser.add_argument("--verbose", action="store_true", help="debug logging to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="create a master password for USER")
    p.add_argument("user")
    p.set_defaults(func=cmd_register)

    p = sub.add_parser("add", help="store a password")
    p.add_argument("user")
    p.add_argument("service")
    p.add_argument("login", help="username for the service")
    p.add_argument("--generate", type=int, metavar="LENGTH", help="generate a password of LENGTH")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("get", help="show one password")
    p.add_argument("user")
    p.add_argument("service")
    p.add_argument("--copy", action="store_true", help="copy to clipboard instead of printing")
    p.set_defaults(func=cmd_get)

    p = sub.add_parser("list", help="show all stored passwords")
    p.add_argument("user")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("delete", help="delete every password for a service")
    p.add_argument("user")
    p.add_argument("service")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("generate", help="print a random password")
    p.add_argument("--length", type=int, default=config.DEFAULT_GENERATED_LENGTH)
    p.set_defaults(func=cmd_generate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    os.makedirs(args.dir, exist_ok=True)
    setup_logging(args.verbose, os.path.join(args.dir, config.LOG_FILE))
    try:
        return args.func(args)
    except (CredentialStoreError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
