"""Scanner that extracts translation strings from JSX/TSX source files."""

import html
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from tree_sitter import Node

from ..cancellation import is_cancelled
from ..config import DEFAULT_EXTENSIONS
from ..errors import IOFailure, ParseFailure
from ..models.extracted_string import ExtractedString, ScanResult
from .syntax import (
    SourceText,
    SyntaxParser,
    callee_name,
    element_content,
    element_name,
    error_lines,
    first_argument,
    in_error_region,
    is_plain_string,
    string_value,
    walk,
    TEXT_NODE_TYPES,
)
from .walker import iter_source_files

logger = logging.getLogger(__name__)


class Scanner:
    """
    Finds strings already marked for translation.

    Two shapes are recognized, and only when statically resolvable:

    1. ``t("Some text")`` - a call to the translation function whose first
       argument is a plain string literal.
    2. ``<T>Some text</T>`` - the translation component whose only child is
       literal text.
    """

    def __init__(
        self,
        function_name: str = "t",
        component_name: str = "T",
        syntax_parser: Optional[SyntaxParser] = None,
    ):
        self.function_name = function_name
        self.component_name = component_name
        self.syntax = syntax_parser or SyntaxParser()

    @classmethod
    def from_config(cls, config, syntax_parser: Optional[SyntaxParser] = None) -> "Scanner":
        return cls(
            function_name=config.function_name,
            component_name=config.component_name,
            syntax_parser=syntax_parser,
        )

    def parse_file(self, file_path: Path) -> ScanResult:
        """
        Read and scan a single file.

        Args:
            file_path: Path to the source file

        Returns:
            ScanResult; read failures end up in ``errors``
        """
        try:
            content = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return ScanResult(errors=[str(IOFailure(str(file_path), str(e)))], files_scanned=1)

        result = self.parse_content(content, str(file_path))
        result.files_scanned = 1
        return result

    def parse_content(self, content: str, file_path: str = "unknown") -> ScanResult:
        """
        Extract translation strings from source text.

        Args:
            content: Source code
            file_path: Identity used in the extracted records

        Returns:
            ScanResult with the strings found
        """
        result = ScanResult()
        source = SourceText(content)

        try:
            tree = self.syntax.parse(source.data, file_path)
        except Exception as e:
            result.errors.append(str(ParseFailure(file_path, str(e))))
            return result

        lines = error_lines(tree.root_node)
        if lines:
            logger.warning(
                "Recovered from syntax errors in %s (line %s)",
                file_path, ", ".join(str(line) for line in lines),
            )

        for node in walk(tree.root_node):
            if node.type == "call_expression":
                extracted = self._from_call(node, source, file_path)
            elif node.type == "jsx_element":
                extracted = self._from_element(node, source, file_path)
            else:
                continue
            if extracted is None:
                continue
            if in_error_region(node):
                logger.warning(
                    "Extracted %r from a damaged region of %s (line %d)",
                    extracted.key, file_path, extracted.line,
                )
            result.strings.append(extracted)

        return result

    def _from_call(self, call: Node, source: SourceText, file_path: str) -> Optional[ExtractedString]:
        if callee_name(call) != self.function_name:
            return None

        argument = first_argument(call)
        if not is_plain_string(argument):
            return None

        value = string_value(argument)
        line, column = source.location(argument.start_byte)
        return ExtractedString(key=value, value=value, file=file_path, line=line, column=column)

    def _from_element(self, element: Node, source: SourceText, file_path: str) -> Optional[ExtractedString]:
        if element_name(element) != self.component_name:
            return None

        children = element_content(element)
        if not children or any(child.type not in TEXT_NODE_TYPES for child in children):
            return None

        start = children[0].start_byte
        raw = source.data[start:children[-1].end_byte]
        value = html.unescape(raw.decode("utf-8")).strip()
        if not value:
            return None

        leading = len(raw) - len(raw.lstrip())
        line, column = source.location(start + leading)
        return ExtractedString(key=value, value=value, file=file_path, line=line, column=column)

    def scan_directory(
        self,
        dir_path: Path,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        exclude_dirs: Optional[Iterable[Path]] = None,
        cancel=None,
    ) -> ScanResult:
        """
        Recursively scan a directory.

        Args:
            dir_path: Directory (or single file) to scan
            extensions: File extensions to include
            exclude_dirs: Directories to skip, e.g. the locale output directory
            cancel: Optional CancellationToken checked between files

        Returns:
            Aggregated ScanResult; one file's failure never stops the walk
        """
        total = ScanResult()

        for file_path in iter_source_files(dir_path, extensions, exclude_dirs):
            if is_cancelled(cancel):
                total.cancelled = True
                logger.info("Scan cancelled after %d files", total.files_scanned)
                break
            total.extend(self.parse_file(file_path))

        return total
