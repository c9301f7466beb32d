"""
Command-line interface.

    rscan scan alignment.fasta --groups "0..7 8..12 13..20" --consensus low
    rscan serve --port 8000
    rscan shell alignment.fasta
"""
import argparse
import logging
import shlex
import sys
from typing import Callable, NamedTuple, Optional

from rscan import __version__
from rscan.errors import RscanError
from rscan.groups import parse_group_spec
from rscan.render import DEFAULT_SCHEME, list_color_schemes, load_color_scheme, to_ansi
from rscan.schemas import ASPECIFICITY_PRESETS, CONSENSUS_PRESETS
from rscan.session import Session

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def show_scores(session: Session, scheme_name: Optional[str], out=None) -> None:
    scheme = load_color_scheme(scheme_name) if scheme_name else None
    print(to_ansi(session.pages(), session.params.color_ranges, scheme), file=out or sys.stdout)


# --- Interactive shell ---

class Command(NamedTuple):
    handler: Callable[[Session, list[str]], Optional[str]]
    usage: str
    help: str


def _floats(args: list[str], count: int) -> list[float]:
    if len(args) != count:
        raise RscanError(f"expected {count} numeric value(s), got {len(args)}")
    try:
        return [float(a) for a in args]
    except ValueError as e:
        raise RscanError(str(e)) from e


def _open(session: Session, args: list[str]) -> str:
    if len(args) != 1:
        raise RscanError("usage: open FILE")
    alignment = session.open(args[0])
    return f"{alignment.num_seqs} sequences, {alignment.seq_size} positions"


def _set_groups(session: Session, args: list[str]) -> str:
    groups = session.set_groups(parse_group_spec(" ".join(args)))
    return f"{len(groups)} groups"


def _ka(session: Session, args: list[str]) -> str:
    session.set_ka(_floats(args, 1)[0])
    return f"ka = {session.params.ka}"


def _kb(session: Session, args: list[str]) -> str:
    session.set_kb(_floats(args, 1)[0])
    return f"kb = {session.params.kb}"


def _con(session: Session, args: list[str]) -> str:
    return f"ka = {session.consensus(args[0] if args else '')}"


def _asp(session: Session, args: list[str]) -> str:
    return f"kb = {session.aspecificity(args[0] if args else '')}"


def _set_formula(session: Session, args: list[str]) -> str:
    session.set_formula(" ".join(args))
    return session.formula


def _color_ranges(session: Session, args: list[str]) -> str:
    ranges = session.set_color_ranges(_floats(args, 4))
    return "color ranges = " + ", ".join(str(r) for r in ranges)


def _scan(session: Session, args: list[str]) -> None:
    session.scan()
    show_scores(session, args[0] if args else DEFAULT_SCHEME)


def _export(session: Session, args: list[str]) -> str:
    if len(args) != 1:
        raise RscanError("usage: export FILE")
    return f"written {session.export_csv(args[0])}"


def _man(session: Session, args: list[str]) -> str:
    width = max(len(c.usage) for c in COMMANDS.values())
    lines = [f"rscan {__version__} commands:", ""]
    lines += [f"  {c.usage.ljust(width)}  {c.help}" for c in COMMANDS.values()]
    return "\n".join(lines)


COMMANDS: dict[str, Command] = {
    "open": Command(_open, "open FILE", "load an aligned FASTA file"),
    "labels": Command(lambda s, a: "\n".join(s.labels()), "labels", "list sequence indices and labels"),
    "groups": Command(lambda s, a: "\n".join(s.groups_description()), "groups", "show the groups"),
    "set_groups": Command(_set_groups, "set_groups SPEC...", "define groups, e.g. 0..4 5,6,7 8-14"),
    "ka": Command(_ka, "ka N", "set the consensus coefficient"),
    "kb": Command(_kb, "kb N", "set the aspecificity tolerance coefficient"),
    "con": Command(_con, "con strict|high|low", "consensus coefficient preset"),
    "asp": Command(_asp, "asp forbid|penalty|allow", "aspecificity coefficient preset"),
    "formula": Command(lambda s, a: s.formula, "formula", "show the scoring formula"),
    "set_formula": Command(_set_formula, "set_formula EXPR", "set the scoring formula over a, b, ka, kb"),
    "color_ranges": Command(_color_ranges, "color_ranges T1 T2 T3 T4", "set the four band thresholds"),
    "scan": Command(_scan, "scan [SCHEME]", "score the alignment and show the colored pages"),
    "export": Command(_export, "export FILE", "write the scores as CSV"),
    "man": Command(_man, "man", "show this list"),
}


def dispatch(session: Session, line: str) -> Optional[str]:
    """Run one shell command line against the session."""
    words = shlex.split(line)
    if not words:
        return None
    name, args = words[0], words[1:]
    command = COMMANDS.get(name)
    if command is None:
        raise RscanError(f"unknown command {name!r}, type man for the list of commands")
    return command.handler(session, args)


def shell(session: Session, stdin=None) -> None:
    stdin = stdin or sys.stdin
    interactive = stdin.isatty()
    print(f"rscan {__version__} :: alignment shader for signature-sequence search.")
    print("[QuickHelp: type man for the list of commands, quit to leave]\n")
    while True:
        if interactive:
            print(">> ", end="", flush=True)
        line = stdin.readline()
        if not line or line.strip() in ("quit", "exit"):
            break
        try:
            result = dispatch(session, line)
        except (RscanError, ValueError) as e:
            print(f"error: {e}")
            continue
        if result:
            print(result)


# --- Entry point ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rscan",
        description="Nucleotide scoring and color masking of multiple sequence alignments.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Score an alignment and print colored pages")
    scan.add_argument("fasta", help="Aligned FASTA file")
    scan.add_argument("--groups", default="", help='Groups, e.g. "0..4 5,6,7 8-14" (default: one per sequence)')
    ka = scan.add_mutually_exclusive_group()
    ka.add_argument("--ka", type=float, help="Consensus coefficient")
    ka.add_argument("--consensus", choices=list(CONSENSUS_PRESETS), help="Consensus coefficient preset")
    kb = scan.add_mutually_exclusive_group()
    kb.add_argument("--kb", type=float, help="Aspecificity tolerance coefficient")
    kb.add_argument("--aspecificity", choices=list(ASPECIFICITY_PRESETS), help="Aspecificity preset")
    scan.add_argument("--formula", help="Scoring formula over a, b, ka, kb")
    scan.add_argument("--ranges", type=float, nargs=4, metavar="T", help="Four ascending band thresholds")
    scan.add_argument("--window", type=int, help="Columns per page (default 80)")
    scan.add_argument("--label-width", type=int, help="Label column width (default 20)")
    scan.add_argument("--scheme", default=DEFAULT_SCHEME, choices=list_color_schemes(), help="Color scheme")
    scan.add_argument("--no-color", action="store_true", help="Plain text output")
    scan.add_argument("--csv", help="Also write the scores to this CSV file")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    shell_cmd = sub.add_parser("shell", help="Interactive command shell")
    shell_cmd.add_argument("fasta", nargs="?", help="Aligned FASTA file to open")
    return parser


def run_scan(args: argparse.Namespace) -> None:
    session = Session()
    session.open(args.fasta)
    session.set_groups(parse_group_spec(args.groups))
    if args.consensus:
        session.consensus(args.consensus)
    if args.aspecificity:
        session.aspecificity(args.aspecificity)
    changes = {"ka": args.ka, "kb": args.kb, "formula": args.formula,
               "window_length": args.window, "label_width": args.label_width}
    session.update_params(**{k: v for k, v in changes.items() if v is not None})
    if args.ranges:
        session.set_color_ranges(args.ranges)

    session.scan()
    show_scores(session, None if args.no_color else args.scheme)
    if args.csv:
        session.export_csv(args.csv)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "scan":
            run_scan(args)
        elif args.command == "serve":
            import uvicorn
            uvicorn.run("rscan.main:app", host=args.host, port=args.port)
        elif args.command == "shell":
            session = Session()
            if args.fasta:
                session.open(args.fasta)
            shell(session)
    except RscanError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
