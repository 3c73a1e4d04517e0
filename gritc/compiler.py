import json
import logging
import os
from typing import Any, Dict, List, Optional

from .codegen.generator import generate
from .lexer.tokenizer import tokenize
from .parser.parser import parse
from .utils import CompilerArtifactEncoder

logger = logging.getLogger(__name__)


class TranslationPipeline:
    """
    Orchestrates a translation from Grit source text to Rust source text.
    This class manages the flow of data between the tokenizer, the parser and
    the code generator, keeping every stage's artifact for inspection.
    """

    def __init__(
        self,
        source_content: str,
        file_path: Optional[str] = None,
        dump_stages: List[str] = [],
        stop_after_stage: Optional[str] = None,
    ):
        self.source_content = source_content
        self.file_path = os.path.abspath(file_path) if file_path else "<stdin>"
        self.dump_stages = dump_stages
        self.stop_after_stage = stop_after_stage
        self.artifacts: Dict[str, Any] = {}
        self.results: List[Any] = []

    def run(self) -> Any:
        """
        Executes the pipeline stage by stage and returns the last artifact produced.
        Any CompileError propagates unchanged; nothing is returned on failure.
        """
        # --- Stage 1: Tokenizing ---
        self._run_stage("tokens", tokenize, self.source_content)
        if self.stop_after_stage == "tokens":
            return self.results[-1]

        # --- Stage 2: Parsing ---
        self._run_stage("ast", parse, self.results[-1])
        if self.stop_after_stage == "ast":
            return self.results[-1]

        # --- Stage 3: Code Generation ---
        self._run_stage("rust", generate, self.results[-1])
        return self.results[-1]

    def _run_stage(self, name: str, func, *args, **kwargs) -> Any:
        """Runs a single function as a stage, storing and returning its result."""
        logger.debug("Running stage '%s' for %s", name, self.file_path)
        result = func(*args, **kwargs)
        self.artifacts[name] = result
        self.results.append(result)
        if name in self.dump_stages:
            self.save_artifact(name, result)
        return result

    def save_artifact(self, name: str, data: Any):
        """Saves an intermediate artifact next to the input file as JSON."""
        if self.file_path == "<stdin>":
            base_name = "stdin_output"
        else:
            base_name = os.path.splitext(self.file_path)[0]

        output_path = f"{base_name}.{name}.json"
        logger.info("Saving artifact '%s' to %s", name, output_path)

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=False, cls=CompilerArtifactEncoder)
        except OSError as e:
            logger.error("Could not save artifact '%s': %s", name, e)


def translate(source: str) -> str:
    """
    Translates Grit source text into the text of a Rust program.
    Raises LexError, ParseError or GenerationError (all CompileError) on the first problem.
    """
    return generate(parse(tokenize(source)))


def translate_file(
    source_content: str,
    file_path: Optional[str] = None,
    dump_stages: List[str] = [],
    stop_after_stage: Optional[str] = None,
):
    """High-level entry point for the translation pipeline."""
    pipeline = TranslationPipeline(source_content, file_path, dump_stages, stop_after_stage)
    return pipeline.run()
