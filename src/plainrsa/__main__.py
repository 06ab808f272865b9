"""The Command Line Interface for the utility, including Interactive elements.

A hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface) that generates the INTERACTIVE part
on-the-fly based on the missing components of the CLI interaction, including the option that none are included.

Every command exits with status 0 on success and 1 on any error.

Typical usage example:

    plainrsa -n keygen -p key.pub -P key --keysize 512
    plainrsa -n encrypt -p key.pub --message "hello world"
    python -m plainrsa -n decrypt -P key --message 1234567890
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import os
import pathlib
import sys
import typing

import plainrsa
from plainrsa import errors

logger = logging.getLogger(__name__)


class Option(typing.NamedTuple):
    """A value a subcommand needs, either from its flags or from a prompt."""
    flags: tuple[str, ...]
    description: str
    format: typing.Callable = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


options: dict[str, Option] = {
    "subcommand":
        Option((), "The available subcommands in plainrsa.", choices=["keygen", "encrypt", "decrypt"]),
    "public_key":
        Option(("--public_key", "-p"), "Location of the public key file.", pathlib.Path),
    "private_key":
        Option(("--private_key", "-P"), "Location of the private key file.", pathlib.Path),
    "message":
        Option(("--message",), "Message (decimal ciphertext when decrypting), or a file holding it when prefixed "
               "with `P:`."),
    "encoding":
        Option(("--encoding", "-e"), "Payload encoding.", choices=["utf-8", "utf-16", "ascii"], default="utf-8",
               advanced=True),
    "keysize":
        Option(("--keysize",), "Modulus size (in bits).", int, default=2048),
    "pub_exponent":
        Option(("--pub-exponent",), "Exponent for the public key.", int, default=plainrsa.keygen.DEFAULT_PUB_EXP,
               advanced=True),
    "key_format":
        Option(("--format", "-f"), "Key file format.", choices=list(plainrsa.rsa.KEY_FORMATS), default="text",
               advanced=True),
    "overwrite":
        Option(("--overwrite", "-o"), "Overwrite specified destination files if they exist?", choices=["Y", "N"],
               default="N"),
}

commands = {
    "keygen": ("Key generation utility.", ("public_key", "private_key", "keysize", "pub_exponent", "key_format")),
    "encrypt": ("Encryption utility.", ("public_key", "message", "encoding")),
    "decrypt": ("Decryption utility.", ("private_key", "message", "encoding")),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plainrsa")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {plainrsa.__version__}")
    parser.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
    parser.add_argument("--advanced", "-a", action="store_true", help="Prompt for advanced options as well")
    parser.add_argument("--verbose", "-V", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="subcommand", title="Subcommands")
    for name, (description, wanted) in commands.items():
        sub = subparsers.add_parser(name, help=description)
        for dest in wanted:
            opt = options[dest]
            if opt.choices is not None:
                sub.add_argument(*opt.flags, dest=dest, choices=opt.choices, help=opt.description)
            else:
                sub.add_argument(*opt.flags, dest=dest, type=opt.format, help=opt.description)
    subparsers.choices["keygen"].add_argument(*options["overwrite"].flags,
                                              dest="overwrite",
                                              action="store_const",
                                              const="Y",
                                              help=options["overwrite"].description)
    return parser


def prompt(name: str, non_interactive: bool, advanced: bool, prntr: typing.Callable = print):
    """Asks for a missing value until a usable one is given.

    Options with a default skip the prompt in non-interactive mode, and advanced options skip it unless advanced
    mode is on.

    Raises:
        IOError: If the value is required and non-interactive mode is active.
    """
    opt = options[name]
    if opt.default is not None and (non_interactive or (opt.advanced and not advanced)):
        return opt.default
    if non_interactive:
        raise IOError(f"Argument {name} is missing and non-interactive mode is active.")
    prntr(f"Please specify the {name}!")
    prntr("Description: " + opt.description)
    if opt.choices is not None:
        prntr("Options: " + ", ".join(opt.choices))
    if opt.default is not None:
        prntr(f"Press enter to accept the default: {opt.default}")
    while True:
        ch = input(f"{name}: ")
        if not ch and opt.default is not None:
            return opt.default
        if opt.choices is not None:
            if ch in opt.choices:
                return ch
            prntr("Please select an option from the list.")
        elif not ch:
            prntr("Please provide a value.")
        else:
            try:
                return opt.format(ch)
            except ValueError:
                prntr(f"We could not convert your value to {opt.format.__name__}.")


def read_payload(mess: str, enc: str) -> str:
    """Reads the message from a file when it carries the `P:` prefix."""
    if mess.startswith("P:"):
        with open(mess[2:], "r", encoding=enc) as f:
            return f.read()
    return mess


def write_pair(rpk: plainrsa.RSAPrivKey, private: pathlib.Path, public: pathlib.Path, fmt: str) -> None:
    """Writes both halves of a key pair, or neither.

    Both halves are staged next to their destinations first, so existing files survive a failed export.
    """
    staged = [(private.with_name(f".{private.name}.new"), private), (public.with_name(f".{public.name}.new"), public)]
    try:
        rpk.export(staged[0][0], fmt)
        rpk.pub.export(staged[1][0], fmt)
        for temp, dest in staged:
            os.replace(temp, dest)
    except BaseException:
        for temp, _ in staged:
            temp.unlink(missing_ok=True)
        raise


def run(args: argparse.Namespace, pspr: typing.Callable) -> int:
    match args.subcommand:
        case "keygen":
            if args.private_key.exists() or args.public_key.exists():
                rs = args.overwrite
                if rs is None:
                    rs = prompt("overwrite", args.non_interactive, args.advanced, pspr)
                if rs == "N":
                    print("Destination private or public key already exists!", file=sys.stderr)
                    return 1
            rpk = plainrsa.RSAPrivKey.generate(int(args.keysize), int(args.pub_exponent))
            write_pair(rpk, args.private_key, args.public_key, args.key_format)
            pspr("\nKey pair generated!")
        case "encrypt":
            message = read_payload(args.message, args.encoding)
            rpu = plainrsa.load_public_key(args.public_key)
            ciph = plainrsa.encrypt(message.encode(args.encoding), rpu)
            pspr("Ciphertext:")
            print(ciph)
        case "decrypt":
            message = read_payload(args.message, "ascii")
            rpk = plainrsa.load_private_key(args.private_key)
            clear = plainrsa.decrypt(plainrsa.parse_integer(message), rpk)
            pspr("Cleartext:")
            print(clear.decode(args.encoding))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s:%(name)s: %(message)s")

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not args.non_interactive:
            print(text)

    pspr("Welcome to plainrsa!\n")
    try:
        if not args.subcommand:
            args.subcommand = prompt("subcommand", args.non_interactive, args.advanced)
            args.overwrite = None
        for name in commands[args.subcommand][1]:
            if getattr(args, name, None) is None:
                setattr(args, name, prompt(name, args.non_interactive, args.advanced))
            else:
                pspr(f"{name}: {getattr(args, name)}")
        pspr("\nInput Complete! Executing...")
        status = run(args, pspr)
    except (errors.GenerationError, OSError, ValueError) as exc:
        logger.debug("%s failed.", args.subcommand, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if status == 0:
        pspr("Thank you for using plainrsa!")
        pspr("Goodbye!")
    return status


if __name__ == "__main__":
    sys.exit(main())
