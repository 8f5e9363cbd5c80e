"""
Codemod that wraps literal UI text in translation calls.

Converts ``<p>Hello World</p>`` into ``<p>{t('page_hello_world')}</p>`` and
``title="Save"`` into ``title={t('page_save')}``, and adds the import for the
translation function when the file lacks one.

Edits are recorded as byte spans against the parsed tree and applied in
reverse offset order, so earlier edits never shift later ones. Running the
wrapper over its own output finds nothing new to wrap.

Wrapping performs an unguarded read-modify-write of every file it touches;
callers must not run two wrap passes over the same project at once.
"""

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from tree_sitter import Node

from ..cancellation import is_cancelled
from ..config import DEFAULT_EXTENSIONS
from ..errors import IOFailure, ParseFailure
from ..models.extracted_string import DirectoryWrapResult, WrappedString, WrapResult
from .exclusion import DEFAULT_OPTIONS, FilterOptions, should_exclude, should_exclude_attribute
from .keys import KeyRegistry
from .syntax import (
    SourceText,
    SyntaxParser,
    attribute_parts,
    callee_name,
    element_name,
    first_argument,
    in_error_region,
    is_plain_string,
    node_text,
    string_value,
    text_runs,
    walk,
)
from .walker import iter_source_files

logger = logging.getLogger(__name__)


@dataclass
class _Edit:
    """Replace bytes ``[start, end)`` of the source with ``replacement``."""

    start: int
    end: int
    replacement: str


class _WrapPass:
    """State of one wrap pass over one file."""

    def __init__(self, wrapper: "Wrapper", source: SourceText, file_path: str):
        self.wrapper = wrapper
        self.source = source
        self.file_path = file_path
        self.keys = KeyRegistry(file_path, wrapper.key_prefix)
        self.processed: Set[Tuple[int, int]] = set()
        self.edits: List[_Edit] = []
        self.wrapped: List[WrappedString] = []

    def claim(self, offset: int) -> Optional[Tuple[int, int]]:
        """Reserve a location; None if it was already handled in this pass."""
        location = self.source.location(offset)
        if location in self.processed:
            return None
        self.processed.add(location)
        return location

    def record(self, text: str, start: int, end: int, kind: str) -> None:
        """
        Replace ``[start, end)`` with a call for ``text``.

        ``kind`` is "text" (JSX child, becomes `{t(..)}`), "attribute" (value
        becomes `{t(..)}`, reported as the bare call) or "expression" (string
        inside an existing `{...}`, becomes the bare call).
        """
        location = self.claim(start)
        if location is None:
            return

        key = self.keys.key_for(text)
        call = self.wrapper.call_expression(key)
        replacement = call if kind == "expression" else f"{{{call}}}"
        self.edits.append(_Edit(start, end, replacement))
        self.wrapped.append(
            WrappedString(
                original=text,
                wrapped=replacement if kind == "text" else call,
                key=key,
                line=location[0],
                column=location[1],
            )
        )


class Wrapper:
    """Auto-wraps translatable strings in JSX/TSX files."""

    def __init__(
        self,
        function_name: str = "t",
        component_name: str = "T",
        key_prefix: str = "",
        filter_options: FilterOptions = DEFAULT_OPTIONS,
        import_source: str = "lokal-react",
        syntax_parser: Optional[SyntaxParser] = None,
    ):
        """
        Initialize the wrapper.

        Args:
            function_name: Translation function to call, e.g. ``t``
            component_name: Translation component whose text is already marked
            key_prefix: Optional prefix for every generated key
            filter_options: Minimum length and custom exclusion patterns
            import_source: Module the translation function is imported from
            syntax_parser: Parser to use (a default TSX/TS parser if omitted)
        """
        self.function_name = function_name
        self.component_name = component_name
        self.key_prefix = key_prefix
        self.filter_options = filter_options
        self.import_source = import_source
        self.syntax = syntax_parser or SyntaxParser()

    @classmethod
    def from_config(cls, config, syntax_parser: Optional[SyntaxParser] = None) -> "Wrapper":
        return cls(
            function_name=config.function_name,
            component_name=config.component_name,
            key_prefix=config.key_prefix,
            filter_options=FilterOptions.from_config(config),
            import_source=config.import_source,
            syntax_parser=syntax_parser,
        )

    def call_expression(self, key: str) -> str:
        """Render ``t('key')``."""
        escaped = key.replace("\\", "\\\\").replace("'", "\\'")
        return f"{self.function_name}('{escaped}')"

    # ------------------------------------------------------------------
    # Single file

    def wrap_content(self, content: str, file_path: str = "unknown") -> WrapResult:
        """
        Wrap strings in source text.

        Args:
            content: Source code
            file_path: File identity, used for key generation and reporting

        Returns:
            WrapResult whose ``new_source`` holds the rewritten code when modified
        """
        result = WrapResult(file=file_path)
        source = SourceText(content)

        try:
            tree = self.syntax.parse(source.data, file_path)
        except Exception as e:
            result.errors.append(str(ParseFailure(file_path, str(e))))
            return result

        try:
            wrap_pass = _WrapPass(self, source, file_path)
            self._reserve_existing_keys(tree.root_node, wrap_pass)

            for node in walk(tree.root_node):
                if node.type == "jsx_element":
                    self._visit_element(node, wrap_pass)
                elif node.type == "jsx_attribute":
                    self._visit_attribute(node, wrap_pass)
                elif node.type == "string":
                    self._visit_expression_string(node, wrap_pass)

            if not wrap_pass.edits:
                return result

            edits = list(wrap_pass.edits)
            if not self._declares_function(tree.root_node, wrap_pass.edits):
                edits.append(self._import_edit(tree.root_node))
                result.import_added = True

            result.wrapped = wrap_pass.wrapped
            result.new_source = self._apply(source, edits)
            result.modified = True
        except Exception as e:
            logger.debug("Wrapping failed for %s", file_path, exc_info=True)
            result.errors.append(f"AST wrapping error in {file_path}: {e}")
            result.wrapped = []
            result.new_source = None
            result.modified = False
            result.import_added = False

        return result

    def wrap_file(self, file_path: Path, dry_run: bool = False) -> WrapResult:
        """
        Wrap strings in a file, rewriting it in place unless ``dry_run``.

        Dry-run and real runs detect exactly the same strings; a dry run
        just never writes ``new_source`` back.
        """
        path = Path(file_path)
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            return WrapResult(file=str(path), errors=[str(IOFailure(str(path), str(e)))])

        result = self.wrap_content(content, str(path))

        if result.modified and not dry_run:
            try:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(result.new_source)
                result.written = True
            except OSError as e:
                result.errors.append(str(IOFailure(str(path), f"write failed: {e}")))

        return result

    # ------------------------------------------------------------------
    # Directory

    def wrap_directory(
        self,
        dir_path: Path,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        dry_run: bool = False,
        exclude_dirs: Optional[Iterable[Path]] = None,
        cancel=None,
    ) -> DirectoryWrapResult:
        """
        Wrap strings in every source file under a directory, one file at a time.

        Args:
            dir_path: Directory (or single file) to process
            extensions: File extensions to include
            dry_run: Detect without writing
            exclude_dirs: Directories to skip, e.g. the locale output directory
            cancel: Optional CancellationToken checked between files

        Returns:
            DirectoryWrapResult; a failing file is recorded, never raised
        """
        total = DirectoryWrapResult()

        for file_path in iter_source_files(dir_path, extensions, exclude_dirs):
            if is_cancelled(cancel):
                total.cancelled = True
                logger.info("Wrap cancelled after %d files", len(total.results))
                break

            result = self.wrap_file(file_path, dry_run=dry_run)
            total.results.append(result)
            if result.modified:
                total.modified_files += 1
            for error in result.errors:
                logger.warning(error)

        logger.info(
            "%s %d strings in %d files",
            "Would wrap" if dry_run else "Wrapped",
            total.total_wrapped, total.modified_files,
        )
        return total

    # ------------------------------------------------------------------
    # Visitors

    def _visit_element(self, element: Node, wrap_pass: _WrapPass) -> None:
        """Wrap literal text children: ``<p>Hello</p>``."""
        # Text inside <T>...</T> is already marked for translation
        if element_name(element) == self.component_name:
            return
        if in_error_region(element) or self._inside_translation_call(element):
            return

        data = wrap_pass.source.data
        for run in text_runs(element):
            start, end = run[0].start_byte, run[-1].end_byte
            raw = data[start:end]
            text_start = start + len(raw) - len(raw.lstrip())
            text_end = end - (len(raw) - len(raw.rstrip()))
            if text_end <= text_start:
                continue

            # JSX renders runs of whitespace (including newlines) as one space
            text = " ".join(html.unescape(data[text_start:text_end].decode("utf-8")).split())
            if should_exclude(text, self.filter_options):
                continue

            wrap_pass.record(text, text_start, text_end, kind="text")

    def _visit_attribute(self, attribute: Node, wrap_pass: _WrapPass) -> None:
        """Wrap string attribute values: ``title="Save"``."""
        name, value = attribute_parts(attribute)
        if name is None or value is None or value.type != "string":
            return
        if in_error_region(attribute):
            return

        text = string_value(value).strip()
        if should_exclude_attribute(name, text, self.filter_options):
            return

        wrap_pass.record(text, value.start_byte, value.end_byte, kind="attribute")

    def _visit_expression_string(self, node: Node, wrap_pass: _WrapPass) -> None:
        """Wrap string expressions used as children: ``<p>{"Hello"}</p>``."""
        container = node.parent
        if container is None or container.type != "jsx_expression":
            return
        if container.parent is None or container.parent.type != "jsx_element":
            return
        if in_error_region(node) or self._inside_translation_call(node):
            return

        text = string_value(node)
        if should_exclude(text, self.filter_options):
            return

        wrap_pass.record(text.strip(), node.start_byte, node.end_byte, kind="expression")

    def _inside_translation_call(self, node: Node) -> bool:
        current = node.parent
        while current is not None:
            if current.type == "call_expression" and callee_name(current) == self.function_name:
                return True
            current = current.parent
        return False

    # ------------------------------------------------------------------
    # Import handling

    def _reserve_existing_keys(self, root: Node, wrap_pass: _WrapPass) -> None:
        """Mark keys of ``t('key')`` calls already in the file as taken."""
        for node in walk(root):
            if node.type != "call_expression" or callee_name(node) != self.function_name:
                continue
            argument = first_argument(node)
            if is_plain_string(argument):
                wrap_pass.keys.reserve(string_value(argument))

    def _declares_function(self, root: Node, edits: Sequence[_Edit]) -> bool:
        """
        Check whether every wrapped call can already see the function.

        True when the module imports, requires or defines it at top level, or
        when a nested declaration (``const { t } = useTranslation()``) sits in
        a block enclosing every edit. Parameters and other local bindings
        never count.
        """
        for statement in root.named_children:
            if statement.type == "import_statement":
                if self._imports_function(statement):
                    return True
            elif self._declares_at_top_level(statement):
                return True

        if not edits:
            return False
        first = min(edit.start for edit in edits)
        last = max(edit.end for edit in edits)

        for node in walk(root):
            if node.type != "variable_declarator":
                continue
            target = node.child_by_field_name("name")
            if target is None or not self._binds(target):
                continue
            block = self._enclosing_block(node)
            if block is not None and block.start_byte <= first and last <= block.end_byte:
                return True
        return False

    def _imports_function(self, statement: Node) -> bool:
        name = self.function_name
        for node in walk(statement):
            if node.type == "import_specifier":
                local = node.child_by_field_name("alias") or node.child_by_field_name("name")
                if local is not None and node_text(local) == name:
                    return True
            elif node.type in ("import_clause", "namespace_import"):
                for child in node.named_children:
                    if child.type == "identifier" and node_text(child) == name:
                        return True
        return False

    def _declares_at_top_level(self, statement: Node) -> bool:
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name("declaration")
            if declaration is None:
                return False
            statement = declaration

        if statement.type in ("lexical_declaration", "variable_declaration"):
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                target = declarator.child_by_field_name("name")
                if target is not None and self._binds(target):
                    return True
        elif statement.type in ("function_declaration", "generator_function_declaration"):
            target = statement.child_by_field_name("name")
            return target is not None and node_text(target) == self.function_name
        return False

    @staticmethod
    def _enclosing_block(node: Node) -> Optional[Node]:
        current = node.parent
        while current is not None:
            if current.type == "statement_block":
                return current
            current = current.parent
        return None

    def _binds(self, pattern: Node) -> bool:
        for node in walk(pattern):
            if node.type in ("identifier", "shorthand_property_identifier_pattern"):
                if node_text(node) == self.function_name:
                    return True
        return False

    def _import_edit(self, root: Node) -> _Edit:
        """Build the edit inserting the import after the leading import block."""
        import_line = f"import {{ {self.function_name} }} from '{self.import_source}';"
        require_line = f"const {{ {self.function_name} }} = require('{self.import_source}');"

        last_import = None
        last_require = None
        last_directive = None
        leading = True

        for statement in root.named_children:
            if statement.type == "import_statement":
                last_import = statement
            elif statement.type in ("lexical_declaration", "variable_declaration") and self._is_require(statement):
                last_require = statement
            elif leading and self._is_directive(statement):
                last_directive = statement
                continue
            if statement.type not in ("comment", "hash_bang_line"):
                leading = False

        if last_import is not None:
            return _Edit(last_import.end_byte, last_import.end_byte, "\n" + import_line)
        if last_require is not None:
            return _Edit(last_require.end_byte, last_require.end_byte, "\n" + require_line)
        if last_directive is not None:
            return _Edit(last_directive.end_byte, last_directive.end_byte, "\n" + import_line)
        return _Edit(0, 0, import_line + "\n")

    @staticmethod
    def _is_directive(statement: Node) -> bool:
        """``'use client';`` and friends."""
        if statement.type != "expression_statement" or not statement.named_children:
            return False
        return statement.named_children[0].type == "string"

    @staticmethod
    def _is_require(statement: Node) -> bool:
        for node in walk(statement):
            if node.type == "call_expression" and callee_name(node) == "require":
                return True
        return False

    @staticmethod
    def _apply(source: SourceText, edits: List[_Edit]) -> str:
        """Apply edits from the highest offset down so offsets stay valid."""
        data = bytearray(source.data)
        for edit in sorted(edits, key=lambda e: (e.start, e.end), reverse=True):
            data[edit.start:edit.end] = edit.replacement.encode("utf-8")
        return data.decode("utf-8")
