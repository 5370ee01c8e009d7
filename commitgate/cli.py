import argparse
import json
import logging
import sys

from commitgate import __version__
from commitgate.config import get_config_path


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="commitgate")
    sub = p.add_subparsers(dest="cmd", required=True)

    check_p = sub.add_parser("check", help="Validate a commit message against the issue tracker.")
    check_p.add_argument("--repo", required=True, help="Repository name")
    check_p.add_argument("--ref", required=True, help="Target ref, e.g. refs/heads/main")
    check_p.add_argument("--commit", required=True, help="Commit id (SHA)")
    check_p.add_argument("--message-file", help="File holding the full commit message (default: stdin)")
    check_p.add_argument("--config", help="Path to ITS association config yaml")
    check_p.add_argument("--format", default="text", choices=["text", "json"])
    check_p.add_argument("--verbose", action="store_true", help="Log validation events to stderr")

    config_p = sub.add_parser("validate-config", help="Validate the ITS association config.")
    config_p.add_argument("--config", help="Path to ITS association config yaml")
    config_p.add_argument("--format", default="json", choices=["text", "json"])

    sub.add_parser("version", help="Print version.")
    return p


def _read_message(path):
    if path:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read()
    return sys.stdin.read()


def _print_messages(messages, *, rejected: bool, fmt: str) -> None:
    if fmt == "json":
        print(
            json.dumps(
                {
                    "allowed": not rejected,
                    "messages": [message.as_dict() for message in messages],
                },
                indent=2,
            )
        )
        return
    stream = sys.stderr if rejected else sys.stdout
    for message in messages:
        print(message.text, file=stream)
        print("", file=stream)


def _check(args) -> int:
    from commitgate.its.config import ItsConfig, ItsConfigError
    from commitgate.validation.orchestrator import CommitValidator
    from commitgate.validation.types import CommitEvent, CommitValidationError

    if args.verbose:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        config = ItsConfig.from_file(args.config or get_config_path())
    except ItsConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        message = _read_message(args.message_file)
    except OSError as exc:
        print(f"Error: cannot read commit message: {exc}", file=sys.stderr)
        return 2

    event = CommitEvent(
        repository=args.repo,
        ref_name=args.ref,
        commit_id=args.commit,
        message=message,
    )
    try:
        messages = CommitValidator(config).validate(event)
    except CommitValidationError as exc:
        _print_messages(exc.messages, rejected=True, fmt=args.format)
        return 1
    _print_messages(messages, rejected=False, fmt=args.format)
    return 0


def _validate_config(args) -> int:
    from commitgate.its.config import validate_its_config_file

    report = validate_its_config_file(args.config or get_config_path())
    if args.format == "json":
        print(json.dumps(report, indent=2))
    else:
        for issue in report["issues"]:
            location = f" ({issue['location']})" if issue.get("location") else ""
            print(f"{issue['severity']} {issue['code']}{location}: {issue['message']}")
        print("OK" if report["ok"] else "FAILED")
    return 0 if report["ok"] else 1


def main() -> int:
    # If no arguments provided, show help
    if len(sys.argv) == 1:
        sys.argv.append("--help")

    p = build_parser()
    args = p.parse_args()

    if args.cmd == "version":
        print(f"commitgate {__version__}")
        return 0

    if args.cmd == "check":
        return _check(args)

    if args.cmd == "validate-config":
        return _validate_config(args)

    return 2


if __name__ == "__main__":
    sys.exit(main())
