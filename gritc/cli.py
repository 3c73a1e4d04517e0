import argparse
import json
import logging
import os
import sys
import time

from .compiler import translate_file
from .exceptions import CompileError
from .utils import CompilerArtifactEncoder, TerminalColors

logger = logging.getLogger(__name__)

# This provides a single source of truth for stage names and their order.
STAGE_MAP = {
    "tokens": "Token stream",
    "ast": "Abstract Syntax Tree",
    "rust": "Generated Rust program",
}


def build_arg_parser() -> argparse.ArgumentParser:
    stage_help_text = "Stop after a specific stage, print its artifact and save it next to the input file. "
    for name, desc in STAGE_MAP.items():
        stage_help_text += f"'{name}' for the {desc}. "
    stage_help_text += "Omitting this flag runs the full pipeline and emits Rust."

    parser = argparse.ArgumentParser(prog="gritc", description="Translate a Grit program into a Rust program.")
    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="The path to the input Grit file. Omit to read from stdin.",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_file",
        help="Where to write the generated Rust. Defaults to stdout.",
    )
    parser.add_argument("-c", "--compile", type=str, choices=STAGE_MAP.keys(), help=stage_help_text)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr.")
    return parser


def main(argv=None):
    start_time = time.perf_counter()
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # --- Input Validation ---
    if not args.input_file and sys.stdin.isatty():
        parser.error("input_file is required when not reading from a pipe.")

    script_path_for_display = args.input_file or "stdin"
    logger.info("Translating %s", script_path_for_display)

    try:
        # --- Read Input ---
        if not args.input_file:
            source_content = sys.stdin.read()
            input_file_path_abs = None
        else:
            input_file_path_abs = os.path.abspath(args.input_file)
            with open(input_file_path_abs, "r", encoding="utf-8") as f:
                source_content = f.read()

        stop_after_stage = args.compile if args.compile != "rust" else None

        # An intermediate stage is also saved next to the input file.
        dump_stages = [stop_after_stage] if stop_after_stage and input_file_path_abs else []

        # --- Run Translation ---
        final_product = translate_file(
            source_content,
            file_path=input_file_path_abs,
            dump_stages=dump_stages,
            stop_after_stage=stop_after_stage,
        )

        # --- Handle Output ---
        if stop_after_stage:
            json.dump(final_product, sys.stdout, indent=2, cls=CompilerArtifactEncoder)
            sys.stdout.write("\n")
        elif args.output_file:
            output_file_path = os.path.abspath(args.output_file)
            os.makedirs(os.path.dirname(output_file_path), exist_ok=True)
            with open(output_file_path, "w", encoding="utf-8") as f:
                f.write(final_product)
            print(f"{TerminalColors.GREEN}--- Translation Successful ---{TerminalColors.RESET}", file=sys.stderr)
            print(f"Rust program written to {output_file_path}", file=sys.stderr)
        else:
            sys.stdout.write(final_product)

    # --- Error Handling ---
    except CompileError as e:
        print(f"{TerminalColors.RED}{e.message}{TerminalColors.RESET}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError:
        print(
            f"{TerminalColors.RED}ERROR: Script file '{script_path_for_display}' not found.{TerminalColors.RESET}",
            file=sys.stderr,
        )
        sys.exit(1)
    except Exception as e:
        print(f"{TerminalColors.RED}--- UNEXPECTED TRANSLATOR ERROR ---{TerminalColors.RESET}", file=sys.stderr)
        print("This may be a bug in the translator. Please report it.", file=sys.stderr)
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        duration = time.perf_counter() - start_time
        logger.debug("Total execution time: %.4f seconds", duration)


if __name__ == "__main__":
    main()
