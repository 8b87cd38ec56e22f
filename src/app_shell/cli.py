import argparse
import getpass
import logging
import sys

from src.app_shell.config import ConfigError, load_app_config
from src.app_shell.context import ServiceContext
from src.components.auth import SignupInput, run_signup

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def get_context() -> ServiceContext:
    try:
        config = load_app_config()
    except (ConfigError, FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    return ServiceContext.create(config)


def handle_create_admin(ctx: ServiceContext, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    result = run_signup(
        SignupInput(email=args.email, password=password, name=args.name),
        user_repo=ctx.user_repo,
        hasher=ctx.hasher,
        tokens=ctx.tokens,
        clock=ctx.clock,
        min_password_length=ctx.config.auth.password_min_length,
    )
    if not result.success or result.user is None:
        logger.error(f"Could not create admin: {result.error}")
        return 1

    print(f"Admin created: {result.user.email} ({result.user.id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clinic site API CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin account")
    admin_parser.add_argument("email", help="Admin email address")
    admin_parser.add_argument("--password", help="Password (prompted if omitted)")
    admin_parser.add_argument("--name", default=None, help="Display name")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    ctx = get_context()

    if args.command == "create-admin":
        return handle_create_admin(ctx, args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
