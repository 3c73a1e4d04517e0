from .compiler import TranslationPipeline, translate
from .exceptions import CompileError, GenerationError, LexError, ParseError
from .lexer.tokenizer import tokenize
