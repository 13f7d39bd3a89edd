# phic

`phic` is a front end for the Phi programming language. It takes a list of
tokens and parses them into a syntax tree. Then it checks that tree for scoping
and typing errors. Parse problems are collected as structured diagnostics.
Semantic problems raise an exception.

## Modules

- `phic.source` holds source positions and text:
  - `SrcLocation(path, line, col)` is a single position.
  - `SrcSpan(start, end)` is a range between two positions.
  - `SrcManager` stores files line by line. Use `add_source_file`, `get_line`,
    `get_lines` and `line_count`.
- `phic.diagnostic` defines what a diagnostic contains:
  - `DiagnosticLevel` gives the severity: error, warning, note or help.
  - `Color` and `DiagnosticStyle` describe styling.
  - `DiagnosticLabel` and `DiagnosticSuggestion` are the parts attached to a
    report.
  - `Diagnostic` is the report itself. Its chainable `with_*` methods add parts,
    and `has_primary_labels()` and `primary_span()` inspect them.
  - `style_for_level(level)` returns the default style for a level.
- `phic.diagnostic_builder` builds diagnostics:
  - `DiagnosticBuilder` is a fluent builder, started from `error`, `warning`,
    `note` or `hint`.
  - Ready-made helpers cover common errors: `expected_found_error`,
    `unexpected_token_error`, `missing_token_error`,
    `undeclared_identifier_error` and `type_mismatch_error`.
  - `build()` returns a copy of the diagnostic.
  - `emit(sink)` passes the diagnostic to `sink`. The sink is either an object
    with an `emit` method or a plain callable.
- `phic.types` defines the language's types:
  - `PrimitiveKind` lists the built-in types (`i8`…`u64`, `f32`, `f64`,
    `string`, `char`, `bool`, `range`, `null`).
  - `Type` wraps either a primitive kind or a struct name.
  - `type_from_name` turns a type name into a `Type`.
- `phic.tokens` covers tokens and operator precedence:
  - `TokenKind` and `Token` describe tokens.
  - `kind_name` and `span_from_token` are helpers.
  - `infix_bp`, `prefix_bp` and `postfix_bp` give operator binding powers.
- `phic.nodes` holds the syntax tree node classes:
  - expressions, such as literals, `BinaryOp`, `FunCallExpr`, `StructInitExpr`
    and `MemberAccessExpr`;
  - statements and `Block`;
  - declarations: `VarDecl`, `ParamDecl`, `FieldDecl`, `FunDecl`, `MethodDecl`
    and `StructDecl`.
- `phic.symbol_table` provides `SymbolTable`:
  - a stack of scopes, with `scope()` as a context manager;
  - separate lookups for variables, functions and structs.
- `phic.stream`, `phic.expressions`, `phic.statements` and `phic.parser` form
  the parser, in layers:
  - `TokenStream` handles token navigation and error recovery.
  - `ExpressionParser` is a Pratt expression parser.
  - `StatementParser` adds statements and blocks.
  - `Parser` adds functions and structs and is the layer you use.
- `phic.checks` and `phic.sema` do the semantic checks:
  - `ExpressionChecker` checks expression types.
  - `Sema` checks whole programs.
  - `SemanticError` is raised for any rule that is broken.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from phic.parser import Parser
from phic.sema import Sema
from phic.source import SrcLocation, SrcManager
from phic.tokens import Token, TokenKind

def tok(kind, text, col):
    loc = SrcLocation("main.phi", 1, col)
    return Token(loc, loc, kind, text)

source = "fun main() { return; }"
tokens = [
    tok(TokenKind.FUN_KW, "fun", 1),
    tok(TokenKind.IDENTIFIER, "main", 5),
    tok(TokenKind.OPEN_PAREN, "(", 9),
    tok(TokenKind.CLOSE_PAREN, ")", 10),
    tok(TokenKind.OPEN_BRACE, "{", 12),
    tok(TokenKind.RETURN_KW, "return", 14),
    tok(TokenKind.SEMICOLON, ";", 20),
    tok(TokenKind.CLOSE_BRACE, "}", 22),
]

sources = SrcManager()
parser = Parser(tokens, path="main.phi", source=source, source_manager=sources)
decls = parser.parse()
assert parser.diagnostics == []

checked = Sema(decls).resolve()  # raises SemanticError on a bad program
```

Parse problems never raise. The parser records each one in
`parser.diagnostics` and then skips ahead to the next safe point. If you pass a
sink as the second argument to `Parser`, it also receives each diagnostic as it
is reported.

`Sema.resolve()` checks the program in three passes:

1. It declares struct names.
2. It checks every function signature. Because this happens before any body is
   checked, functions may call each other in any order. This pass also enforces
   that `main` returns `null` and takes no parameters.
3. It checks function bodies and structs.

`Sema` also enforces these rules:

- constants cannot be reassigned;
- private fields and methods cannot be used from outside;
- `break` and `continue` must appear inside a loop.

## What this package does not do

- It has no lexer. You must supply the tokens.
- It does not render diagnostics to a terminal. Diagnostics and their styles are
  plain data for you to display.
- It does not generate code or produce executables.
- It has no command-line tool.