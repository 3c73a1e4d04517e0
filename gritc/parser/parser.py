"""
Recursive-descent parser for Grit.

Statements are parsed with one token of lookahead; expressions use precedence
climbing over the table in gritc.config. The parser stops at the first error
and never returns a partial tree.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional, Tuple

from ..config import (
    BINARY_OPERATOR_MAP,
    COMPARISON_PRECEDENCE,
    FRIENDLY_TOKEN_NAMES,
    OPERATOR_PRECEDENCE,
    SELF_NAME,
)
from ..exceptions import ErrorCode, LexError, ParseError
from ..lexer.tokens import Token, TokenKind
from .classes import *

logger = logging.getLogger(__name__)

# Tokens that may legally follow a complete simple statement.
STATEMENT_TERMINATORS = {TokenKind.NEWLINE, TokenKind.RBRACE, TokenKind.EOF}


def describe_token(token: Token) -> str:
    """Human-readable description of a token for 'expected X but found Y' messages."""
    if token.kind == TokenKind.IDENTIFIER:
        return f"identifier '{token.value}'"
    if token.kind in (TokenKind.INTEGER, TokenKind.FLOAT):
        return f"number {token.value}"
    if token.kind == TokenKind.STRING:
        return f"string '{token.value}'"
    return FRIENDLY_TOKEN_NAMES[token.kind]


class Parser:
    """
    Consumes a token list produced by `tokenize` and builds one Program.
    A Parser instance is single-use: create one per token list.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.position = 0
        self.in_method = False

    # --- Entry points ---

    def parse(self) -> Program:
        """Parses the whole token list into a Program or raises the first error found."""
        self._check_lexical_errors()

        statements: List[Statement] = []
        self._skip_newlines()
        with self._nesting_limit():
            while not self._check(TokenKind.EOF):
                statements.append(self._parse_statement(top_level=True))
                self._skip_newlines()

        logger.debug("Parsed %d top-level statements", len(statements))
        return Program(span=Span(line=1, column=1), statements=statements)

    def parse_expression_only(self) -> Expression:
        """Parses a single expression followed by the end of input."""
        self._check_lexical_errors()
        self._skip_newlines()
        with self._nesting_limit():
            expression = self._parse_expression()
        self._skip_newlines()
        self._expect(TokenKind.EOF)
        return expression

    @contextmanager
    def _nesting_limit(self):
        """Reports input nested deeper than the interpreter's stack as a ParseError at the token reached."""
        try:
            yield
        except RecursionError:
            token = self._current()
            raise ParseError(ErrorCode.NESTING_TOO_DEEP, line=token.line, column=token.column) from None

    # --- Token helpers ---

    def _current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        # A token list without its EOF still ends somewhere.
        last = self.tokens[-1] if self.tokens else None
        return Token(kind=TokenKind.EOF, line=last.line if last else 1, column=last.column if last else 1)

    def _peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return Token(kind=TokenKind.EOF, line=self._current().line, column=self._current().column)

    def _previous(self) -> Optional[Token]:
        return self.tokens[self.position - 1] if self.position > 0 else None

    def _check(self, kind: TokenKind) -> bool:
        return self._current().kind == kind

    def _advance(self) -> Token:
        token = self._current()
        if self.position < len(self.tokens):
            self.position += 1
        return token

    def _expect(self, kind: TokenKind, expected: Optional[str] = None) -> Token:
        if not self._check(kind):
            raise self._error(expected or FRIENDLY_TOKEN_NAMES[kind])
        return self._advance()

    def _skip_newlines(self):
        while self._check(TokenKind.NEWLINE):
            self._advance()

    def _error(self, expected: str, token: Optional[Token] = None) -> ParseError:
        token = token or self._current()
        return ParseError(ErrorCode.SYNTAX_UNEXPECTED_TOKEN, line=token.line, column=token.column, expected=expected, found=describe_token(token))

    def _check_lexical_errors(self):
        """Reports the first INVALID token the tokenizer produced."""
        for token in self.tokens:
            if token.kind != TokenKind.INVALID:
                continue
            text = str(token.value)
            if text == "'":
                code = ErrorCode.LEX_UNTERMINATED_STRING
            elif text.isdigit():
                code = ErrorCode.LEX_INTEGER_OUT_OF_RANGE
            else:
                code = ErrorCode.LEX_INVALID_CHARACTER
            raise LexError(code, line=token.line, column=token.column, char=text)

    # --- Statements ---

    def _parse_statement(self, top_level: bool = False) -> Statement:
        token = self._current()

        if token.kind in (TokenKind.CLASS, TokenKind.FN):
            if not top_level:
                raise self._error("a statement (definitions are only allowed at the top level)")
            statement = self._parse_class_def() if token.kind == TokenKind.CLASS else self._parse_function_or_method_def()
        elif token.kind == TokenKind.IF:
            statement = self._parse_if()
        elif token.kind == TokenKind.WHILE:
            statement = self._parse_while()
        elif token.kind == TokenKind.IDENTIFIER and self._peek().kind == TokenKind.ASSIGN:
            statement = self._parse_assignment()
        elif token.kind == TokenKind.SELF and self._peek().kind == TokenKind.DOT and self._peek(3).kind == TokenKind.ASSIGN:
            statement = self._parse_self_field_assign()
        else:
            expression = self._parse_expression()
            statement = ExpressionStatement(span=expression.span, expression=expression)

        self._expect_statement_end()
        return statement

    def _expect_statement_end(self):
        """A statement ends at a newline, a closing brace or the end of input."""
        if self._current().kind in STATEMENT_TERMINATORS:
            if self._check(TokenKind.NEWLINE):
                self._advance()
            return
        previous = self._previous()
        if previous is not None and previous.kind == TokenKind.NEWLINE:
            # Block statements may already have consumed the newlines after their '}'.
            return
        raise self._error("a newline")

    def _parse_assignment(self) -> Assignment:
        name_token = self._advance()
        self._advance()  # '='
        value = self._parse_expression()
        return Assignment(span=self._span(name_token), name=name_token.value, value=value)

    def _parse_self_field_assign(self) -> SelfFieldAssign:
        self_token = self._advance()
        if not self.in_method:
            raise ParseError(ErrorCode.SYNTAX_SELF_OUTSIDE_METHOD, line=self_token.line, column=self_token.column)
        self._advance()  # '.'
        field_token = self._expect(TokenKind.IDENTIFIER, "a field name")
        self._expect(TokenKind.ASSIGN)
        value = self._parse_expression()
        return SelfFieldAssign(span=self._span(self_token), field=field_token.value, value=value)

    def _parse_class_def(self) -> ClassDef:
        class_token = self._advance()
        name_token = self._expect(TokenKind.IDENTIFIER, "a class name")
        return ClassDef(span=self._span(class_token), name=name_token.value)

    def _parse_function_or_method_def(self) -> Statement:
        """
        fn name(params) { body }
        fn ClassName > method_name(params) { body }

        The '>' right after the first name is what makes this a method.
        """
        fn_token = self._advance()
        first_name = self._expect(TokenKind.IDENTIFIER, "a function or class name").value

        if self._check(TokenKind.GT):
            self._advance()
            method_name = self._expect(TokenKind.IDENTIFIER, "a method name").value
            self.in_method = True
            try:
                params, body = self._parse_params_and_body()
            finally:
                self.in_method = False
            return MethodDef(span=self._span(fn_token), class_name=first_name, method_name=method_name, params=params, body=body)

        params, body = self._parse_params_and_body()
        return FunctionDef(span=self._span(fn_token), name=first_name, params=params, body=body)

    def _parse_params_and_body(self) -> Tuple[List[str], List[Statement]]:
        params: List[str] = []
        # The parameter list may be omitted entirely: `fn Foo > get { a }`.
        if self._check(TokenKind.LPAREN):
            self._advance()
            self._skip_newlines()
            if not self._check(TokenKind.RPAREN):
                while True:
                    params.append(self._expect(TokenKind.IDENTIFIER, "a parameter name").value)
                    self._skip_newlines()
                    if self._check(TokenKind.COMMA):
                        self._advance()
                        self._skip_newlines()
                        continue
                    break
            self._expect(TokenKind.RPAREN, "',' or ')'")

        self._skip_newlines()
        return params, self._parse_block()

    def _parse_block(self) -> List[Statement]:
        """Parses `{ statements }`, consuming both braces."""
        self._expect(TokenKind.LBRACE)
        body: List[Statement] = []
        self._skip_newlines()
        while not self._check(TokenKind.RBRACE):
            if self._check(TokenKind.EOF):
                raise self._error("'}'")
            body.append(self._parse_statement())
            self._skip_newlines()
        self._advance()  # '}'
        return body

    def _parse_if(self) -> If:
        if_token = self._advance()
        condition = self._parse_expression()
        self._skip_newlines()
        then_branch = self._parse_block()

        elif_branches: List[ElifBranch] = []
        else_branch: Optional[List[Statement]] = None

        # elif/else may start on the line after the closing brace.
        while self._next_significant_kind() == TokenKind.ELIF:
            self._skip_newlines()
            elif_token = self._advance()
            elif_condition = self._parse_expression()
            self._skip_newlines()
            elif_branches.append(ElifBranch(span=self._span(elif_token), condition=elif_condition, body=self._parse_block()))

        if self._next_significant_kind() == TokenKind.ELSE:
            self._skip_newlines()
            self._advance()
            self._skip_newlines()
            else_branch = self._parse_block()

        return If(span=self._span(if_token), condition=condition, then_branch=then_branch, elif_branches=elif_branches, else_branch=else_branch)

    def _next_significant_kind(self) -> TokenKind:
        offset = 0
        while self._peek(offset).kind == TokenKind.NEWLINE:
            offset += 1
        return self._peek(offset).kind

    def _parse_while(self) -> While:
        while_token = self._advance()
        condition = self._parse_expression()
        self._skip_newlines()
        body = self._parse_block()
        return While(span=self._span(while_token), condition=condition, body=body)

    # --- Expressions ---

    def _parse_expression(self, min_precedence: int = COMPARISON_PRECEDENCE) -> Expression:
        """Precedence climbing. Every binary operator is left-associative."""
        left = self._parse_unary()

        while True:
            op = BINARY_OPERATOR_MAP.get(self._current().kind)
            if op is None:
                break
            precedence = OPERATOR_PRECEDENCE[op]
            if precedence < min_precedence:
                break
            self._advance()
            right = self._parse_expression(precedence + 1)
            left = BinaryOp(span=left.span, left=left, op=op, right=right)

        return left

    def _parse_unary(self) -> Expression:
        if self._check(TokenKind.MINUS):
            minus_token = self._advance()
            return UnaryOp(span=self._span(minus_token), operand=self._parse_unary())
        return self._parse_postfix(self._parse_primary())

    def _parse_postfix(self, expression: Expression) -> Expression:
        """Handles `.name` and `.name(args)`, which bind tighter than any operator."""
        while self._check(TokenKind.DOT):
            self._advance()
            name = self._expect(TokenKind.IDENTIFIER, "a field or method name").value
            is_call = self._check(TokenKind.LPAREN)
            args = self._parse_arguments() if is_call else []
            expression = FieldAccess(span=expression.span, receiver=expression, name=name, is_call=is_call, args=args)
        return expression

    def _parse_primary(self) -> Expression:
        token = self._current()

        if token.kind == TokenKind.INTEGER:
            self._advance()
            return IntegerLiteral(span=self._span(token), value=token.value)

        if token.kind == TokenKind.FLOAT:
            self._advance()
            return FloatLiteral(span=self._span(token), value=token.value)

        if token.kind == TokenKind.STRING:
            self._advance()
            return StringLiteral(span=self._span(token), value=token.value)

        if token.kind == TokenKind.SELF:
            if not self.in_method:
                raise ParseError(ErrorCode.SYNTAX_SELF_OUTSIDE_METHOD, line=token.line, column=token.column)
            self._advance()
            return Identifier(span=self._span(token), name=SELF_NAME)

        if token.kind == TokenKind.IDENTIFIER:
            self._advance()
            if self._check(TokenKind.LPAREN):
                return FunctionCall(span=self._span(token), callee=token.value, args=self._parse_arguments())
            return Identifier(span=self._span(token), name=token.value)

        if token.kind == TokenKind.LPAREN:
            self._advance()
            self._skip_newlines()
            inner = self._parse_expression()
            self._skip_newlines()
            self._expect(TokenKind.RPAREN, "')'")
            return Grouped(span=self._span(token), inner=inner)

        raise ParseError(ErrorCode.SYNTAX_INVALID_EXPRESSION, line=token.line, column=token.column, expected="an expression", found=describe_token(token))

    def _parse_arguments(self) -> List[Expression]:
        """Parses `( expr, expr, ... )`, consuming both parentheses."""
        self._expect(TokenKind.LPAREN)
        args: List[Expression] = []
        self._skip_newlines()
        if not self._check(TokenKind.RPAREN):
            while True:
                args.append(self._parse_expression())
                self._skip_newlines()
                if self._check(TokenKind.COMMA):
                    self._advance()
                    self._skip_newlines()
                    continue
                break
        self._expect(TokenKind.RPAREN, "',' or ')'")
        return args

    @staticmethod
    def _span(token: Token) -> Span:
        return Span(line=token.line, column=token.column)


def parse(tokens: List[Token]) -> Program:
    """High-level entry point for the parsing stage."""
    return Parser(tokens).parse()


def parse_expression(tokens: List[Token]) -> Expression:
    return Parser(tokens).parse_expression_only()
