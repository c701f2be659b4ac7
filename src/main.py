import sys
import logging
from typing import Dict, TextIO

from errors import PaymentsError, error_chain
from models import ClientAccount
from payments_engine import PaymentsEngine

HEADER = "client,available,held,total,locked"


def format_account(account: ClientAccount) -> str:
    return (
        f"{account.client_id},"
        f"{account.available},"
        f"{account.held},"
        f"{account.total},"
        f"{str(account.locked).lower()}"
    )


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    print(HEADER, file=stream)
    for client_id in sorted(accounts.keys()):
        print(format_account(accounts[client_id]), file=stream)


def report_fatal(error: PaymentsError, stream: TextIO) -> None:
    message, *causes = error_chain(error)
    print(f"Error: {message}", file=stream)
    for cause in causes:
        print(f"  caused by: {cause}", file=stream)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(argv[0])
    except PaymentsError as e:
        report_fatal(e, sys.stderr)
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
