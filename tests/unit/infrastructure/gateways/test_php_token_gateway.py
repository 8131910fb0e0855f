"""Unit tests for the PHP token gateway."""

from pathlib import Path

import pytest

from coupling_detector.domain.entities import Location, QualifiedName
from coupling_detector.domain.errors import NodeParseError
from coupling_detector.infrastructure.gateways.php_token_gateway import PhpLexer, PhpNodeParser

SAMPLE = """\
<?php

namespace Acme\\Component\\Foo;

use Pim\\Bundle\\X;
use Acme\\Component\\Bar as Baz, Bundle\\Thing;

// use Pim\\Commented\\Out;
/* use Pim\\Block\\Comment; */
# use Pim\\Hash\\Comment;

class Foo
{
    use SomeTrait;
    public function run(\\Pim\\Bundle\\Inline $value): string
    {
        $callback = function () use ($value) {
            return 'use Pim\\Quoted;';
        };
        return $value->use;
    }
}
"""


def _symbols(node) -> list[str]:
    return [str(reference.symbol) for reference in node.references]


class TestPhpNodeParser:
    """Test namespace and reference extraction."""

    def test_imports_with_locations(self) -> None:
        node = PhpNodeParser().parse_source(SAMPLE, "Foo.php")

        assert node.file_path == "Foo.php"
        assert node.declared_namespace == QualifiedName.parse("Acme/Component/Foo")
        assert _symbols(node) == ["Pim\\Bundle\\X", "Acme\\Component\\Bar", "Bundle\\Thing"]
        assert [reference.location for reference in node.references] == [
            Location(5, 5),
            Location(6, 5),
            Location(6, 32),
        ]

    def test_inline_references_when_enabled(self) -> None:
        node = PhpNodeParser(include_inline_references=True).parse_source(SAMPLE)

        assert _symbols(node)[-1] == "Pim\\Bundle\\Inline"
        assert node.references[-1].location == Location(15, 25)

    def test_group_use_and_function_imports(self) -> None:
        source = """<?php
namespace App;
use Pim\\Component\\{Model\\Product, Repository as Repo};
use function Pim\\Util\\helper;
use const Pim\\Util\\VERSION;
"""
        node = PhpNodeParser().parse_source(source)

        assert _symbols(node) == [
            "Pim\\Component\\Model\\Product",
            "Pim\\Component\\Repository",
            "Pim\\Util\\helper",
            "Pim\\Util\\VERSION",
        ]

    def test_file_without_namespace(self) -> None:
        node = PhpNodeParser().parse_source("<?php\nuse Pim\\X;\n")

        assert node.declared_namespace.is_empty()
        assert _symbols(node) == ["Pim\\X"]

    def test_braced_namespace(self) -> None:
        source = "<?php\nnamespace Acme\\Braced {\n    use Pim\\X;\n    class A {}\n}\n"

        node = PhpNodeParser().parse_source(source)

        assert node.declared_namespace == QualifiedName.parse("Acme/Braced")
        assert _symbols(node) == ["Pim\\X"]

    def test_only_first_namespace_is_kept(self) -> None:
        node = PhpNodeParser().parse_source("<?php\nnamespace First;\nnamespace Second;\n")

        assert node.declared_namespace == QualifiedName.parse("First")

    def test_heredoc_body_is_ignored(self) -> None:
        source = "<?php\nnamespace A;\n$x = <<<EOT\nuse Pim\\Hidden;\nEOT;\nuse Pim\\Visible;\n"

        assert _symbols(PhpNodeParser().parse_source(source)) == ["Pim\\Visible"]

    def test_inline_html_is_ignored(self) -> None:
        source = "<html>use Pim\\Html;<?php namespace A; ?>\n<p>use Pim\\Para;</p>\n<?php use Pim\\Real;\n"

        assert _symbols(PhpNodeParser().parse_source(source)) == ["Pim\\Real"]

    def test_close_tag_ends_a_line_comment(self) -> None:
        source = "<?php\nnamespace Acme\\Component;\nuse Pim\\X;\n// render ?>\n<p>It's fine</p>\n"

        node = PhpNodeParser().parse_source(source, "view.html.php")

        assert _symbols(node) == ["Pim\\X"]

    def test_close_tag_ends_a_hash_comment(self) -> None:
        source = "<?php # done ?><p>Don't parse</p><?php use Pim\\Y;\n"

        assert _symbols(PhpNodeParser().parse_source(source)) == ["Pim\\Y"]

    def test_question_mark_inside_comment_is_still_a_comment(self) -> None:
        source = "<?php\n// why? it's fine\nuse Pim\\Z;\n"

        assert _symbols(PhpNodeParser().parse_source(source)) == ["Pim\\Z"]

    def test_use_inside_enum_is_a_trait_use(self) -> None:
        source = "<?php\nnamespace A;\nenum Suit: string\n{\n    use SomeTrait;\n    case Hearts = 'H';\n}\n"

        assert _symbols(PhpNodeParser().parse_source(source)) == []

    def test_unterminated_comment_is_a_parse_error(self) -> None:
        with pytest.raises(NodeParseError) as exc_info:
            PhpNodeParser().parse_source("<?php\n/* never closed\nuse Pim\\X;\n", "broken.php")

        assert exc_info.value.file_path == "broken.php"
        assert "unterminated" in exc_info.value.reason

    def test_invalid_utf8_file_is_a_parse_error(self, tmp_path: Path) -> None:
        path = tmp_path / "Bad.php"
        path.write_bytes(b"<?php \xff\xfe")

        with pytest.raises(NodeParseError) as exc_info:
            PhpNodeParser().parse(str(path))

        assert exc_info.value.reason == "invalid UTF-8 at byte 6"

    def test_missing_file_is_a_parse_error(self, tmp_path: Path) -> None:
        with pytest.raises(NodeParseError):
            PhpNodeParser().parse(str(tmp_path / "Missing.php"))

    def test_parse_reads_file_with_bom(self, php_tree) -> None:
        path = php_tree("Acme/Foo.php", "\ufeff<?php\nnamespace Acme;\nuse Pim\\X;\n")

        node = PhpNodeParser().parse(str(path))

        assert node.file_path == str(path)
        assert node.declared_namespace == QualifiedName.parse("Acme")


class TestPhpLexer:
    def test_comments_and_strings_are_dropped(self) -> None:
        tokens = PhpLexer().tokenize("<?php 'a' \"b\" // c\n/* d */ $e;")

        assert [(token.kind, token.text) for token in tokens] == [("variable", "$e"), ("punct", ";")]

    def test_attribute_is_not_a_comment(self) -> None:
        tokens = PhpLexer().tokenize("<?php #[Attr]\n")

        assert [token.text for token in tokens] == ["#", "[", "Attr", "]"]

    def test_unterminated_string_raises(self) -> None:
        with pytest.raises(ValueError):
            PhpLexer().tokenize("<?php 'open")
