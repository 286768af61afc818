"""Command line entry point: ``shush encrypt|decrypt|exec``."""
import argparse
import logging
import sys

from shush import __version__
from shush.config import LOG_LEVELS, Config
from shush.env.store import OsEnvironmentStore
from shush.env.substitution import EnvSubstitutionEngine
from shush.errors import InputError, ShushError
from shush.kms.aws_kms import AWSKMSProvider
from shush.kms.gateway import KmsGateway
from shush.kms.key import resolve_key
from shush.logging.json_logger import configure_logging

logger = logging.getLogger(__name__)

STDIN_MARKER = '-'


def _key_argument(value):
    if not value:
        raise argparse.ArgumentTypeError("key must not be empty")
    return resolve_key(value)


def _read_text(value, strip_newline=False):
    """Positional text, or the whole of stdin when omitted or '-'.

    With `strip_newline`, trailing CR/LF picked up from ``echo`` or a file
    are dropped from stdin input.
    """
    if value is not None and value != STDIN_MARKER:
        return value
    try:
        text = sys.stdin.read()
    except UnicodeDecodeError as e:
        raise InputError(f"Standard input is not valid UTF-8: {e}") from e
    if strip_newline:
        text = text.rstrip('\r\n')
    return text


def _add_padding_flag(p):
    p.add_argument('--no_padding', '--no-padding', dest='no_padding', action='store_true',
                   help='Base64 ciphertext without trailing = padding')


def build_parser(config: Config) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='shush', description='Encrypt, decrypt and inject secrets with AWS KMS.')
    p.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    p.add_argument('--region', default=config.region, help='AWS region of the KMS key')
    p.add_argument('--log-level', default=config.log_level, choices=LOG_LEVELS, type=str.upper)
    sub = p.add_subparsers(dest='action', required=True, metavar='{encrypt,decrypt,exec}')

    enc = sub.add_parser('encrypt', help='Encrypt plaintext with a KMS key')
    enc.add_argument('--key', '-k', required=True, type=_key_argument,
                     help='Key id, ARN, alias/NAME or bare alias NAME')
    enc.add_argument('--trim', '-t', action='store_true', help='Strip surrounding whitespace first')
    _add_padding_flag(enc)
    enc.add_argument('plain_text', nargs='?', help="Plaintext, or '-'/omitted to read stdin")

    dec = sub.add_parser('decrypt', help='Decrypt a ciphertext token')
    _add_padding_flag(dec)
    dec.add_argument('--print-key', '-p', dest='print_key', action='store_true',
                     help='Print the id of the key used instead of the plaintext')
    dec.add_argument('cipher_text', nargs='?', help="Ciphertext, or '-'/omitted to read stdin")

    ex = sub.add_parser('exec', help='Decrypt prefixed variables, then run a command')
    _add_padding_flag(ex)
    ex.add_argument('--prefix', default=config.prefix,
                    help=f'Prefix of encrypted variables (default: {config.prefix})')
    ex.add_argument('command', nargs=argparse.REMAINDER, help='Command and arguments, after --')
    return p


def build_gateway(config: Config, region: str | None = None) -> KmsGateway:
    provider = AWSKMSProvider(region_name=region or config.region,
                              endpoint_url=config.endpoint_url,
                              profile_name=config.profile)
    return KmsGateway(provider)


def _write(text: str):
    sys.stdout.write(text)
    sys.stdout.flush()


def run_encrypt(gateway: KmsGateway, args) -> int:
    plain_text = _read_text(args.plain_text)
    if args.trim:
        plain_text = plain_text.strip()
    _write(gateway.encrypt(args.key, plain_text, args.no_padding))
    return 0


def run_decrypt(gateway: KmsGateway, args) -> int:
    result = gateway.decrypt(_read_text(args.cipher_text, strip_newline=True), args.no_padding)
    _write(result.key_id if args.print_key else result.plaintext)
    return 0


def run_exec(gateway: KmsGateway, args) -> int:
    engine = EnvSubstitutionEngine(gateway, OsEnvironmentStore(),
                                   prefix=args.prefix, no_padding=args.no_padding)
    command = args.command
    return engine.run(command[0], command[1:])


ACTIONS = {
    'encrypt': run_encrypt,
    'decrypt': run_decrypt,
    'exec': run_exec,
}


def main(argv=None) -> int:
    config = Config.from_env()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    if args.action == 'exec':
        if args.command and args.command[0] == '--':
            args.command = args.command[1:]
        if not args.command:
            parser.error('exec: a command to run is required')
        if not args.prefix:
            parser.error('exec: --prefix must not be empty')

    configure_logging(args.log_level, config.log_format)

    try:
        gateway = build_gateway(config, args.region)
        return ACTIONS[args.action](gateway, args)
    except ShushError as e:
        logger.debug("%s failed", args.action, exc_info=True)
        print(f"shush: error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


def entrypoint():
    sys.exit(main())


if __name__ == '__main__':
    entrypoint()
