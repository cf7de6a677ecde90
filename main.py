import argparse
import sys

from commands.anime import anime
from ui.components import TerminalPrompt
from utils.exceptions import PromptError, QuaniresError
from utils.logging import configure_logging, get_logger

__version__ = "0.3.0"

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quanires",
        description="Mira anime sin salir de la terminal.",
    )
    parser.add_argument(
        "--query",
        "-q",
        help="Busqueda inicial (omite la primera pregunta)",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Muestra diagnosticos y la salida del reproductor",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(args) -> int:
    """Run the session and turn errors into an exit status."""
    prompt = TerminalPrompt()
    try:
        return anime(args, prompt)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        prompt.outro("Adios!")
        return 130
    except PromptError as e:
        # The prompt itself is broken, fall back to plain stderr
        logger.exception("Prompt failure")
        print(e, file=sys.stderr)
        return 1
    except QuaniresError as e:
        logger.error(f"Session aborted: {e}")
        prompt.error(str(e))
        prompt.outro("Hasta la proxima.")
        return 1


def cli() -> None:
    """Entry point para CLI."""
    args = build_parser().parse_args()
    configure_logging(debug=args.debug)
    sys.exit(main(args))


if __name__ == "__main__":
    cli()
