"""
Mint an access token for the admin endpoints.

    python -m auth --subject ops --role admin
"""

from __future__ import annotations

import argparse

from . import security


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="python -m auth", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--subject", required=True, help="Who the token is for (stored as `sub`).")
    parser.add_argument("--role", default=security.ADMIN_ROLE)
    parser.add_argument(
        "--expire-minutes",
        type=int,
        default=None,
        help="Defaults to ACCESS_TOKEN_EXPIRE_MIN.",
    )
    args = parser.parse_args(argv)
    print(
        security.build_access_token(
            subject=args.subject,
            role=args.role,
            expire_minutes=args.expire_minutes,
        )
    )


if __name__ == "__main__":
    main()
