import argparse
import dataclasses
import enum
import logging
import sys
import typing as t

from pyrsistent import PVector, pvector

logger = logging.getLogger(__name__)

# lookahead once the input is exhausted
END = "\0"

RECURSION_LIMIT = 2000


def allow_deeper_parsing(limit: int = RECURSION_LIMIT) -> None:
    # never lower a limit the host has already raised
    sys.setrecursionlimit(max(sys.getrecursionlimit(), limit))


allow_deeper_parsing()


def lex(statement: str) -> "PVector[str]":
    """Drop the spaces, keep every other character in order"""
    return pvector(char for char in statement if char != " ")


class Operator(enum.Enum):
    NOT = "Not"
    AND = "and"
    OR = "or"
    IMPLIES = "implies"


class _Node:
    def __str__(self) -> str:
        return to_string(self)


@dataclasses.dataclass(frozen=True)
class Variable(_Node):
    name: str

    @property
    def left(self) -> None:
        return None

    @property
    def right(self) -> None:
        return None


@dataclasses.dataclass(frozen=True)
class Negation(_Node):
    value: "TreeNode"

    @property
    def name(self) -> str:
        return Operator.NOT.value

    @property
    def left(self) -> None:
        return None

    @property
    def right(self) -> "TreeNode":
        return self.value


@dataclasses.dataclass(frozen=True)
class BinaryOperator(_Node):
    operator: Operator
    lhs: "TreeNode"
    rhs: "TreeNode"

    @property
    def name(self) -> str:
        return self.operator.value

    @property
    def left(self) -> "TreeNode":
        return self.lhs

    @property
    def right(self) -> "TreeNode":
        return self.rhs


type TreeNode = Variable | Negation | BinaryOperator


@dataclasses.dataclass(frozen=True)
class NotParsed:
    """
    A failed parse. `position` indexes the lexed characters, i.e. the input
    with its spaces removed.
    """

    reason: str
    position: int

    def __bool__(self) -> bool:
        return False


type ParseResult = TreeNode | NotParsed


def to_string(tree: TreeNode) -> str:
    """Fully parenthesized infix form, e.g. `((Not (A)) implies ((B) or (C)))`"""
    match tree:
        case Variable(name=n):
            return f"({n})"
        case Negation(value=value):
            return f"({tree.name} {to_string(value)})"
        case BinaryOperator(lhs=l, rhs=r):
            return f"({to_string(l)} {tree.name} {to_string(r)})"
        case _:
            raise NotImplementedError("unreachable")


def to_compact_string(tree: TreeNode) -> str:
    """Like to_string, but variables go bare: `((Not A) implies (B or C))`"""
    match tree:
        case Variable(name=n):
            return n
        case Negation(value=value):
            return f"({tree.name} {to_compact_string(value)})"
        case BinaryOperator(lhs=l, rhs=r):
            return f"({to_compact_string(l)} {tree.name} {to_compact_string(r)})"
        case _:
            raise NotImplementedError("unreachable")


class Parser:
    """
    Itty-bitty recursive-descent parser with one character of lookahead.

    Grammar, loosest binding first; every binary operator is right-associative:

        start       := disjunction [ "->" start ]
        disjunction := conjunction [ "|" disjunction ]
        conjunction := negation [ "&" conjunction ]
        negation    := [ "!" ] literal
        literal     := "(" start ")" | <any single character>

    A failure is returned as a NotParsed value, never raised, and stops the
    parse where it happens. Consumed input is never given back.
    """

    def __init__(self, statement: str) -> None:
        self.statement = statement
        self.chars = lex(statement)
        self._parse_idx = 0

    def _done(self) -> bool:
        return self._parse_idx >= len(self.chars)

    @property
    def current(self) -> str:
        if self._done():
            return END
        return self.chars[self._parse_idx]

    def _advance(self) -> None:
        self._parse_idx += 1

    def _fail(self, reason: str) -> NotParsed:
        logger.debug(
            "parsing %r failed at %d: %s", self.statement, self._parse_idx, reason
        )
        return NotParsed(reason, self._parse_idx)

    def accept(self, expected: str) -> bool:
        if not self._done() and self.current == expected:
            self._advance()
            return True
        return False

    def parse(self) -> ParseResult:
        """Parse the whole statement; trailing input is an error"""
        try:
            result = self.start()
        except RecursionError:
            return self._fail("nesting too deep")
        if result and not self._done():
            return self._fail("not all input consumed")
        return result

    def start(self) -> ParseResult:
        lhs = self.disjunction()
        if not lhs or not self.accept("-"):
            return lhs
        if not self.accept(">"):
            return self._fail("expected '>' after '-'")
        match self.start():
            case NotParsed() as failure:
                return failure
            case rhs:
                return BinaryOperator(Operator.IMPLIES, lhs, rhs)

    def disjunction(self) -> ParseResult:
        lhs = self.conjunction()
        if not lhs or not self.accept("|"):
            return lhs
        # the '|' is gone now, so a bad right side fails the whole thing
        match self.disjunction():
            case NotParsed() as failure:
                return failure
            case rhs:
                return BinaryOperator(Operator.OR, lhs, rhs)

    def conjunction(self) -> ParseResult:
        lhs = self.negation()
        if not lhs or not self.accept("&"):
            return lhs
        match self.conjunction():
            case NotParsed() as failure:
                return failure
            case rhs:
                return BinaryOperator(Operator.AND, lhs, rhs)

    def negation(self) -> ParseResult:
        if not self.accept("!"):
            return self.literal()
        match self.literal():
            case NotParsed() as failure:
                return failure
            case inner:
                return Negation(inner)

    def literal(self) -> ParseResult:
        if self.accept("("):
            inner = self.start()
            if not inner:
                return inner
            if not self.accept(")"):
                return self._fail("expected ')'")
            return inner

        if self._done():
            return self._fail("unexpected end of input")
        name = self.current
        self._advance()
        # only the character after the variable is checked, not the variable
        if self.current.isupper():
            return self._fail(
                f"variable {name!r} is followed by uppercase {self.current!r}"
            )
        return Variable(name)


def parse(statement: str) -> ParseResult:
    return Parser(statement).parse()


def report(statement: str, compact: bool = False) -> ParseResult:
    print(statement)
    result = parse(statement)
    if result:
        render = to_compact_string if compact else to_string
        print(f"{render(result)}\n")
    else:
        print("Failed to parse the input")
    return result


DEMO_STATEMENTS = ("!A -> B | A & C", "!A -> (B | A) & C")


def main(argv: t.Sequence[str] | None = None) -> int:
    arg_parser = argparse.ArgumentParser(
        prog="proptree",
        description="Parse propositional formulas and print them fully parenthesized.",
    )
    arg_parser.add_argument(
        "statements",
        nargs="*",
        metavar="STATEMENT",
        help="formula to parse, or '-' to read one from stdin "
        "(default: a couple of demo formulas)",
    )
    arg_parser.add_argument(
        "-v", "--verbose", action="store_true", help="log why parsing failed"
    )
    arg_parser.add_argument(
        "--compact",
        action="store_true",
        help="print variables without their own parentheses",
    )
    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    statements = [
        sys.stdin.read().strip() if statement == "-" else statement
        for statement in args.statements
    ] or list(DEMO_STATEMENTS)

    results = [report(statement, compact=args.compact) for statement in statements]
    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
