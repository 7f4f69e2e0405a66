"""Test the raw scanner: states, comments, strings, and recovery from malformed input."""

from bithlex.scanner import Scanner, scan
from bithlex.tokens import ScanState, TokenKind

from tests.conftest import assert_kinds, assert_lexemes, assert_partition


class TestRawWords:
    def test_keywords_are_raw_identifiers(self):
        tokens = scan("if checksig")
        assert_kinds(
            tokens, [TokenKind.IDENTIFIER, TokenKind.WHITESPACE, TokenKind.IDENTIFIER]
        )

    def test_word_with_digits_and_underscore(self):
        tokens = scan("_sig_2")
        assert_lexemes(tokens, ["_sig_2"])


class TestNextToken:
    def test_end_of_input_returns_none(self):
        assert Scanner("abc").next_token(3) is None
        assert Scanner("").next_token(0) is None

    def test_returns_default_state_after_every_token(self):
        scanner = Scanner('a "s" /* c */ // d\n')
        offset = 0
        while True:
            result = scanner.next_token(offset)
            if result is None:
                break
            tok, state = result
            assert state == ScanState.DEFAULT
            offset = tok.end
        assert offset == len(scanner.source)

    def test_starting_mid_document(self):
        tok, _ = Scanner("abc def").next_token(4)
        assert tok.lexeme == "def"
        assert (tok.start, tok.end) == (4, 7)

    def test_resume_inside_block_comment(self):
        tok, state = Scanner("still comment */ x").next_token(0, ScanState.IN_BLOCK_COMMENT)
        assert tok.kind == TokenKind.BLOCK_COMMENT
        assert tok.lexeme == "still comment */"
        assert state == ScanState.DEFAULT

    def test_resume_inside_line_comment(self):
        tok, _ = Scanner("rest of line\nnext").next_token(0, ScanState.IN_LINE_COMMENT)
        assert tok.kind == TokenKind.LINE_COMMENT
        assert tok.lexeme == "rest of line"

    def test_resume_inside_string(self):
        tok, _ = Scanner('abc" x').next_token(0, ScanState.IN_STRING_LITERAL)
        assert tok.kind == TokenKind.STRING_LITERAL
        assert tok.lexeme == 'abc"'

    def test_resume_line_comment_at_terminator_makes_progress(self):
        tok, _ = Scanner("\nx").next_token(0, ScanState.IN_LINE_COMMENT)
        assert tok.kind == TokenKind.WHITESPACE
        assert tok.end > tok.start

    def test_resume_string_at_terminator_makes_progress(self):
        tok, _ = Scanner("\nx").next_token(0, ScanState.IN_STRING_LITERAL)
        assert tok.kind == TokenKind.WHITESPACE

    def test_tokens_reconstructs_full_stream(self):
        source = 'pragma bithoven version 0.0.1;\n(a: bool)\n{ return true; }'
        assert list(Scanner(source).tokens()) == scan(source)
        assert_partition(scan(source), source)


class TestLineComments:
    def test_comment_to_end_of_document(self):
        tokens = scan("// note")
        assert_kinds(tokens, [TokenKind.LINE_COMMENT])

    def test_comment_excludes_newline(self):
        tokens = scan("// note\nx")
        assert_kinds(
            tokens, [TokenKind.LINE_COMMENT, TokenKind.WHITESPACE, TokenKind.IDENTIFIER]
        )
        assert_lexemes(tokens, ["// note", "\n", "x"])

    def test_comment_stops_at_carriage_return(self):
        tokens = scan("// a\r\nb")
        assert_lexemes(tokens, ["// a", "\r\n", "b"])

    def test_comment_swallows_string_and_block_openers(self):
        tokens = scan('// "unterminated /* not a block')
        assert_kinds(tokens, [TokenKind.LINE_COMMENT])

    def test_empty_comment(self):
        tokens = scan("//\n")
        assert_lexemes(tokens, ["//", "\n"])


class TestBlockComments:
    def test_single_line(self):
        tokens = scan("/* c */x")
        assert_kinds(tokens, [TokenKind.BLOCK_COMMENT, TokenKind.IDENTIFIER])
        assert tokens[0].lexeme == "/* c */"

    def test_multi_line(self):
        source = "/*\n * a\n * b\n */\nx"
        tokens = scan(source)
        assert tokens[0].kind == TokenKind.BLOCK_COMMENT
        assert tokens[0].lexeme == "/*\n * a\n * b\n */"

    def test_first_close_wins(self):
        tokens = scan("/* a /* b */ c */")
        assert tokens[0].lexeme == "/* a /* b */"
        assert tokens[2].lexeme == "c"

    def test_empty_block(self):
        tokens = scan("/**/")
        assert_kinds(tokens, [TokenKind.BLOCK_COMMENT])

    def test_opener_star_does_not_close(self):
        tokens = scan("/*/ x")
        assert_kinds(tokens, [TokenKind.BLOCK_COMMENT])
        assert tokens[0].lexeme == "/*/ x"

    def test_unterminated_runs_to_end_of_document(self):
        source = "a /* open\nb c"
        tokens = scan(source)
        assert_kinds(
            tokens, [TokenKind.IDENTIFIER, TokenKind.WHITESPACE, TokenKind.BLOCK_COMMENT]
        )
        assert tokens[-1].end == len(source)
        assert_partition(tokens, source)


class TestStringLiterals:
    def test_simple(self):
        tokens = scan('"0245"')
        assert_kinds(tokens, [TokenKind.STRING_LITERAL])

    def test_empty_string(self):
        tokens = scan('""')
        assert_kinds(tokens, [TokenKind.STRING_LITERAL])

    def test_no_escapes(self):
        tokens = scan('"a\\"b"')
        assert_lexemes(tokens, ['"a\\"', "b", '"'])
        assert tokens[0].kind == TokenKind.STRING_LITERAL
        assert tokens[2].kind == TokenKind.UNKNOWN

    def test_comment_markers_inside_string(self):
        tokens = scan('"// /* */"')
        assert_kinds(tokens, [TokenKind.STRING_LITERAL])


class TestBoundedBlastRadius:
    def test_unterminated_string_stops_at_end_of_line(self):
        source = 'verify x == "abc\nreturn true;'
        tokens = scan(source)
        bad = [t for t in tokens if t.kind == TokenKind.UNKNOWN]
        assert len(bad) == 1
        assert bad[0].lexeme == '"abc'
        after = tokens[tokens.index(bad[0]) + 1 :]
        assert_lexemes(after, ["\n", "return", " ", "true", ";"])
        assert_partition(tokens, source)

    def test_unterminated_string_at_end_of_document(self):
        tokens = scan('x "abc')
        assert tokens[-1].kind == TokenKind.UNKNOWN
        assert tokens[-1].lexeme == '"abc'

    def test_lone_quote(self):
        tokens = scan('"')
        assert_kinds(tokens, [TokenKind.UNKNOWN])

    def test_quote_before_newline(self):
        tokens = scan('"\n"x"')
        assert_kinds(
            tokens, [TokenKind.UNKNOWN, TokenKind.WHITESPACE, TokenKind.STRING_LITERAL]
        )
        assert_lexemes(tokens, ['"', "\n", '"x"'])


class TestPartition:
    def test_garbage(self):
        source = '@@ "x\n/*/ ** \x00 éè ||| ===\r'
        assert_partition(scan(source), source)

    def test_only_newlines(self):
        source = "\n\n\r\n"
        tokens = scan(source)
        assert_kinds(tokens, [TokenKind.WHITESPACE])

    def test_deterministic(self):
        source = 'if a { return checksig (s, "x"); } // c\n/* d'
        assert scan(source) == scan(source)
