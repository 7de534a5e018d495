#!/usr/bin/python3
# -*- coding: utf-8 -*-
"""
Script Inliner Module for JS Inliner
Final build stage: inlines local <script src="..."> files into the HTML
documents of a build output directory, optionally minifying them.
Implements MCP tool: inlineScripts, listHtmlFiles
"""
import importlib
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

# Import core modules
from core.exceptions import (
    OutputMissing,
    ResolutionError,
    MinifierUnavailable,
    MinifyError,
    FileIOError,
    ValidationError,
    ConfigurationError
)
from core.logging_config import get_logger, STAGE_TAG
from core.utils import InlineConfig

# Setup logger
logger = get_logger(__name__)


HTML_EXTENSION = '.html'

# scheme-prefixed (http:, https:, data:, ...) or protocol-relative (//cdn...)
REMOTE_SRC_RE = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.\-]*:|//)')

CLOSING_SCRIPT_RE = re.compile(r'</(script)', re.IGNORECASE)

# Fixed minification policy. The minifying printer never emits comments and
# console calls are left as they are.
MINIFY_POLICY = {
    'passes': 2,
    'drop_debugger': True,
    'mangle': True,
    'mangle_globals': False,
}

MINIFIER_MODULES = ('calmjs.parse', 'calmjs.parse.asttypes', 'calmjs.parse.unparsers.es5')


# ============================================================================
# OutputScanner
# ============================================================================

def find_html_files(output_dir: str) -> List[str]:
    """
    Recursively collect every HTML file under the output directory.

    Uses an explicit stack instead of recursion. Entries are visited in sorted
    order so repeated runs see files in the same sequence; symlinked
    directories are followed once.

    Args:
        output_dir (str): Build output root

    Returns:
        list: Absolute paths of the HTML files

    Raises:
        OutputMissing: If output_dir does not exist
    """
    root = os.path.abspath(output_dir)
    if not os.path.isdir(root):
        raise OutputMissing(root)

    html_files = []
    visited = set()
    stack = [root]

    while stack:
        current = stack.pop()
        real = os.path.realpath(current)
        if real in visited:
            continue
        visited.add(real)

        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"{STAGE_TAG} Cannot list directory {current}: {e}")
            continue

        subdirs = []
        for entry in entries:
            if entry.is_dir():
                subdirs.append(entry.path)
            elif entry.name.endswith(HTML_EXTENSION):
                html_files.append(entry.path)

        # Reversed so the first subdirectory is popped first
        stack.extend(reversed(subdirs))

    return html_files


# ============================================================================
# ScriptReferenceLocator
# ============================================================================

@dataclass(frozen=True)
class ScriptReference:
    tag: str    # Full matched tag text
    src: str    # Source path from the tag's src attribute

    @property
    def is_remote(self) -> bool:
        return bool(REMOTE_SRC_RE.match(self.src))

    def is_candidate(self, marker: str, inline_all: bool = False) -> bool:
        """Local script that carries the marker, or any local script with inline_all."""
        if self.is_remote:
            return False
        return inline_all or marker in self.tag


def compile_tag_pattern(pattern: Union[str, 're.Pattern', None] = None) -> 're.Pattern':
    """
    Compile the script tag pattern. Group 1 must capture the source path.

    Raises:
        ConfigurationError: If the pattern is invalid or has no capture group
    """
    if pattern is None:
        pattern = InlineConfig.DEFAULTS['scriptTagPattern']

    if isinstance(pattern, str):
        try:
            pattern = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid scriptTagPattern: {e}")
    elif not isinstance(pattern, re.Pattern):
        raise ConfigurationError(
            f"scriptTagPattern must be a string or compiled regex, got {type(pattern).__name__}"
        )

    if pattern.groups < 1:
        raise ConfigurationError("scriptTagPattern must capture the source path in group 1")

    return pattern


class ScriptMatches:
    """Lazy sequence of script references; iterating again rescans the text."""

    def __init__(self, pattern: 're.Pattern', text: str):
        self._pattern = pattern
        self._text = text

    def __iter__(self) -> Iterator[ScriptReference]:
        for match in self._pattern.finditer(self._text):
            src = match.group(1)
            if not src:
                continue
            yield ScriptReference(tag=match.group(0), src=src.strip())


class ScriptReferenceLocator:
    def __init__(self, pattern=None):
        self.pattern = compile_tag_pattern(pattern)

    def locate(self, html: str) -> ScriptMatches:
        return ScriptMatches(self.pattern, html)


# ============================================================================
# SourceResolver
# ============================================================================

def _clean_src(src: str) -> str:
    # Drop cache-busting query strings and fragments, and treat a leading
    # slash as relative to whichever root is being tried
    path = re.split(r'[?#]', src, maxsplit=1)[0]
    return path.lstrip('/')


def candidate_paths(
    src: str,
    html_dir: str,
    output_root: str,
    cwd: str,
    source_dirs: Iterable[str] = ()
) -> List[str]:
    """
    Build the ordered resolution chain for a script source path.

    Order: document directory, output root, working directory, then each
    extra source directory (relative ones taken from the working directory)
    with a leading './' removed from the source path.

    Pure function: nothing is read from disk.
    """
    path = _clean_src(src)
    candidates = [
        os.path.abspath(os.path.join(html_dir, path)),
        os.path.abspath(os.path.join(output_root, path)),
        os.path.abspath(os.path.join(cwd, path)),
    ]

    stripped = re.sub(r'^\./', '', path)
    for source_dir in source_dirs:
        candidates.append(os.path.abspath(os.path.join(cwd, source_dir, stripped)))

    return candidates


def first_existing(
    candidates: Iterable[str],
    exists: Callable[[str], bool] = os.path.isfile
) -> Optional[str]:
    """Return the first candidate accepted by exists, or None."""
    for candidate in candidates:
        if exists(candidate):
            return candidate
    return None


class SourceResolver:
    """Maps a script src to a file on disk through the resolution chain."""

    def __init__(
        self,
        output_root: str,
        source_dirs: Optional[Iterable[str]] = None,
        cwd: Optional[str] = None,
        exists: Callable[[str], bool] = os.path.isfile
    ):
        self.output_root = os.path.abspath(output_root)
        self.source_dirs = list(InlineConfig.DEFAULTS['sourceDirs'] if source_dirs is None else source_dirs)
        self.cwd = os.path.abspath(cwd or os.getcwd())
        self._exists = exists

    def resolve(self, src: str, html_dir: str) -> str:
        """
        Resolve src for a document living in html_dir.

        Returns:
            str: Absolute path of the first existing candidate

        Raises:
            ResolutionError: If no candidate exists; carries every attempt
        """
        candidates = candidate_paths(src, html_dir, self.output_root, self.cwd, self.source_dirs)
        found = first_existing(candidates, self._exists)
        if found is None:
            raise ResolutionError(src, candidates)
        return found


# ============================================================================
# ContentTransformer
# ============================================================================

def strip_debugger_statements(program, asttypes) -> int:
    """
    Remove every debugger statement from a parsed program, in place.

    Debugger statements inside statement lists are dropped. One that is the
    whole body of a construct (``if (x) debugger;``) becomes an empty
    statement instead.

    Returns:
        int: Number of statements removed
    """
    removed = 0
    visited = set()
    stack = [program]

    while stack:
        node = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))

        for name, value in list(vars(node).items()):
            if isinstance(value, asttypes.Debugger):
                setattr(node, name, asttypes.EmptyStatement(';'))
                removed += 1
            elif isinstance(value, asttypes.Node):
                stack.append(value)
            elif isinstance(value, list):
                kept = [item for item in value if not isinstance(item, asttypes.Debugger)]
                if len(kept) != len(value):
                    removed += len(value) - len(kept)
                    value[:] = kept
                stack.extend(item for item in kept if isinstance(item, asttypes.Node))

    return removed


class MinifierHandle:
    """
    Run-scoped, lazily loaded minifier backend (calmjs.parse).

    The backend modules are imported on first use only. If loading fails for
    any reason the handle stays unavailable for the rest of the run and is
    never retried.
    """

    package = 'calmjs.parse'

    def __init__(self, importer: Callable[[str], Any] = importlib.import_module):
        self._importer = importer
        self._parse = None
        self._asttypes = None
        self._print = None
        self._state = 'unloaded'
        self.load_attempts = 0

    @property
    def available(self) -> Optional[bool]:
        """True/False once a load was attempted, None before."""
        if self._state == 'unloaded':
            return None
        return self._state == 'loaded'

    def load(self) -> bool:
        if self._state != 'unloaded':
            return self._state == 'loaded'

        self.load_attempts += 1
        try:
            parser, asttypes, unparser = [self._importer(name) for name in MINIFIER_MODULES]
            self._parse = parser.es5
            self._asttypes = asttypes
            self._print = unparser.minify_print
        except Exception as e:
            self._state = 'unavailable'
            error = MinifierUnavailable(self.package, f"{type(e).__name__}: {e}")
            logger.warning(f"{STAGE_TAG} {error}. Install it with: pip install {self.package}")
            logger.warning(f"{STAGE_TAG} Continuing without minification")
            return False

        self._state = 'loaded'
        logger.info(f"{STAGE_TAG} Minification is enabled and {self.package} is available")
        return True

    def minify(self, content: str, src: str) -> str:
        """
        Minify one script with MINIFY_POLICY.

        Raises:
            MinifierUnavailable: If the backend could not be loaded
            MinifyError: If the backend fails on this script
        """
        if not self.load():
            raise MinifierUnavailable(self.package)

        # Each pass reparses the previous output; stop once a pass changes nothing
        for _ in range(MINIFY_POLICY['passes']):
            minified = self._minify_once(content, src)
            if minified == content:
                break
            content = minified
        return content

    def _minify_once(self, content: str, src: str) -> str:
        try:
            program = self._parse(content)
            if MINIFY_POLICY['drop_debugger']:
                dropped = strip_debugger_statements(program, self._asttypes)
                if dropped:
                    logger.debug(f"{STAGE_TAG} Dropped {dropped} debugger statement(s) from {src}")
            minified = self._print(
                program,
                obfuscate=MINIFY_POLICY['mangle'],
                obfuscate_globals=MINIFY_POLICY['mangle_globals'],
            )
        except Exception as e:
            raise MinifyError(src, str(e)) from e

        if not isinstance(minified, str):
            raise MinifyError(src, f"minifier returned {type(minified).__name__}, expected str")
        return minified


@dataclass
class TransformResult:
    content: str
    outcome: str = 'skipped'  # 'skipped' | 'minified' | 'failed'


def _identity(content, src):
    return content


class ContentTransformer:
    def __init__(
        self,
        transform: Optional[Callable[[str, str], str]] = None,
        minify: bool = False,
        minifier: Optional[MinifierHandle] = None
    ):
        if transform is not None and not callable(transform):
            raise ConfigurationError("transformContent must be callable")
        self._transform = transform or _identity
        self.minify = minify
        self.minifier = minifier if minifier is not None else MinifierHandle()

    def transform(self, content: str, src: str) -> TransformResult:
        """
        Apply the user transform, then minify if enabled and available.

        A minifier failure for this script falls back to the transformed,
        unminified text.
        """
        content = self._transform(content, src)
        if not isinstance(content, str):
            raise ValidationError(
                'transformContent',
                f"returned {type(content).__name__} for {src}, expected str"
            )

        if not self.minify or not self.minifier.load():
            return TransformResult(content)

        logger.info(f"{STAGE_TAG} Minifying {src}...")
        try:
            minified = self.minifier.minify(content, src)
        except MinifyError as e:
            logger.warning(f"{STAGE_TAG} {e}")
            return TransformResult(content, 'failed')

        original_size = len(content.encode('utf-8'))
        minified_size = len(minified.encode('utf-8'))
        savings = (1 - minified_size / original_size) * 100 if original_size else 0.0
        logger.info(
            f"{STAGE_TAG} Minified {src}: {original_size} → {minified_size} bytes "
            f"({savings:.1f}% savings)"
        )
        return TransformResult(minified, 'minified')


# ============================================================================
# DocumentRewriter
# ============================================================================

def build_inline_tag(content: str) -> str:
    """Wrap script text in a bare <script> element."""
    # A literal </script inside the code would close the element early
    safe = CLOSING_SCRIPT_RE.sub(r'<\\/\1', content)
    return f'<script>{safe}</script>'


class DocumentRewriter:
    def apply(self, html: str, substitutions: Iterable[Tuple[str, str]]) -> Tuple[str, List[str]]:
        """
        Replace the first occurrence of each original tag with an inline script.

        Args:
            html: Document text
            substitutions: (original tag text, script content) pairs

        Returns:
            tuple: (updated text, original tags actually replaced)
        """
        applied = []
        for original, content in substitutions:
            if original not in html:
                continue
            html = html.replace(original, build_inline_tag(content), 1)
            applied.append(original)
        return html, applied

    def persist(self, html_file: str, html: str) -> None:
        try:
            with open(html_file, 'w', encoding='utf-8', newline='') as f:
                f.write(html)
        except OSError as e:
            raise FileIOError(html_file, str(e))


def read_text(path: str) -> str:
    """Read a UTF-8 file without newline translation."""
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileIOError(path, str(e))


# ============================================================================
# Orchestrator
# ============================================================================

class ScriptInliner:
    """
    Drives scan -> locate -> resolve -> transform -> rewrite over an output tree.

    Failures are contained per script reference, then per file. Only a missing
    output directory stops the run, and it is reported rather than raised.
    """

    def __init__(
        self,
        output_dir: str,
        minify: bool = False,
        script_tag_pattern=None,
        transform_content: Optional[Callable[[str, str], str]] = None,
        source_dirs: Optional[Iterable[str]] = None,
        inline_all: bool = False,
        inline_marker: str = 'inline',
        minifier: Optional[MinifierHandle] = None,
        cwd: Optional[str] = None
    ):
        if not inline_marker:
            raise ConfigurationError("inlineMarker must be a non-empty string")

        self.cwd = os.path.abspath(cwd or os.getcwd())
        self.output_dir = os.path.abspath(os.path.join(self.cwd, output_dir))
        self.inline_all = inline_all
        self.inline_marker = inline_marker

        self.minifier = minifier if minifier is not None else MinifierHandle()

        self.locator = ScriptReferenceLocator(script_tag_pattern)
        self.resolver = SourceResolver(self.output_dir, source_dirs, cwd=self.cwd)
        self.transformer = ContentTransformer(transform_content, minify, self.minifier)
        self.rewriter = DocumentRewriter()

    def _relative(self, path: str) -> str:
        return os.path.relpath(path, self.output_dir)

    def run(self) -> Dict[str, Any]:
        """
        Process every HTML file of the output directory.

        Returns:
            dict: {
                'outputDir': str,
                'status': str (completed|skipped),
                'htmlFiles': int,
                'filesModified': list,
                'scriptsInlined': int,
                'minified': int,
                'unresolved': list of {'file', 'src', 'attempted'},
                'failedFiles': list of {'file', 'error'},
                'minifierAvailable': bool or None
            }
        """
        report = {
            'outputDir': self.output_dir,
            'status': 'completed',
            'htmlFiles': 0,
            'filesModified': [],
            'scriptsInlined': 0,
            'minified': 0,
            'unresolved': [],
            'failedFiles': [],
            'minifierAvailable': None,
        }

        logger.info(f"{STAGE_TAG} Looking for HTML files in {self.output_dir}...")
        try:
            html_files = find_html_files(self.output_dir)
        except OutputMissing as e:
            logger.warning(f"{STAGE_TAG} {e}")
            report['status'] = 'skipped'
            return report

        report['htmlFiles'] = len(html_files)
        logger.info(f"{STAGE_TAG} Found {len(html_files)} HTML files in output directory")

        for html_file in html_files:
            try:
                self.process_file(html_file, report)
            except Exception as e:
                logger.error(f"{STAGE_TAG} Error processing HTML file {html_file}: {e}")
                report['failedFiles'].append({'file': html_file, 'error': str(e)})

        report['minifierAvailable'] = self.minifier.available
        logger.info(f"{STAGE_TAG} Inlining completed successfully")
        return report

    def process_file(self, html_file: str, report: Optional[Dict[str, Any]] = None) -> bool:
        """
        Inline the eligible scripts of one HTML file.

        Returns:
            bool: True if the file was rewritten
        """
        if report is None:
            report = {'scriptsInlined': 0, 'minified': 0, 'unresolved': [], 'filesModified': []}

        relative = self._relative(html_file)
        logger.info(f"{STAGE_TAG} Processing HTML file: {relative}")

        html = read_text(html_file)
        html_dir = os.path.dirname(html_file)

        substitutions = []
        sources = {}
        seen = set()
        for ref in self.locator.locate(html):
            if not ref.is_candidate(self.inline_marker, self.inline_all):
                continue
            if ref.tag in seen:
                # Only the first of several identical tags is replaced per pass
                logger.debug(f"{STAGE_TAG} Duplicate tag for {ref.src} left for a later pass")
                continue
            seen.add(ref.tag)

            try:
                script_path = self.resolver.resolve(ref.src, html_dir)
                result = self.transformer.transform(read_text(script_path), ref.src)
            except ResolutionError as e:
                logger.warning(f"{STAGE_TAG} Could not find JavaScript file to inline: {ref.src}")
                logger.warning(f"{STAGE_TAG} Attempted paths:")
                for index, attempted in enumerate(e.attempted, 1):
                    logger.warning(f"{STAGE_TAG} {index}. {attempted}")
                report['unresolved'].append({'file': html_file, 'src': ref.src, 'attempted': e.attempted})
                continue
            except Exception as e:
                logger.error(f"{STAGE_TAG} Error inlining JavaScript file {ref.src}: {e}")
                continue

            if result.outcome == 'minified':
                report['minified'] += 1
            sources[ref.tag] = ref.src
            substitutions.append((ref.tag, result.content))

        html, applied = self.rewriter.apply(html, substitutions)
        if not applied:
            logger.info(f"{STAGE_TAG} No scripts to inline in: {relative}")
            return False

        self.rewriter.persist(html_file, html)
        for tag in applied:
            logger.info(f"{STAGE_TAG} Inlined JavaScript file: {sources[tag]}")
        report['scriptsInlined'] += len(applied)
        report['filesModified'].append(html_file)
        logger.info(f"{STAGE_TAG} Updated HTML file with inlined scripts: {relative}")
        return True


# ============================================================================
# MCP Tool: inlineScripts
# ============================================================================

def inlineScripts(outputDir=None, params='', configFile=None, cwd=None, **options):
    """
    Inline local scripts into the HTML files of a build output directory.

    Settings are layered: built-in defaults, then the jsInline section of
    config.yaml, then the params string, then keyword options.

    Args:
        outputDir (str): Build output directory (default: 'dist' in cwd)
        params (str): Parameter string (e.g., 'minify=true;inlineAll=true;sourceDirs=src,public')
        configFile (str): Explicit config.yaml path, read for this call only
        cwd (str): Working directory used for resolution (default: os.getcwd())
        **options: minify, scriptTagPattern, transformContent, sourceDirs,
            inlineAll, inlineMarker

    Returns:
        dict: Run report (see ScriptInliner.run)

    Raises:
        ConfigurationError: If the settings are invalid
        ValidationError: If an option is unknown or a params value is malformed
    """
    kwargs = InlineConfig.resolve_settings(outputDir, params, configFile, options)
    inliner = ScriptInliner(cwd=cwd, **kwargs)
    return inliner.run()


# ============================================================================
# MCP Tool: listHtmlFiles
# ============================================================================

def listHtmlFiles(outputDir):
    """
    List the HTML files the inlining stage would visit.

    Args:
        outputDir (str): Build output directory

    Returns:
        dict: {
            'outputDir': str (absolute path),
            'htmlFiles': list (paths relative to outputDir),
            'count': int
        }

    Raises:
        OutputMissing: If outputDir does not exist
    """
    root = os.path.abspath(outputDir)
    html_files = find_html_files(root)
    return {
        'outputDir': root,
        'htmlFiles': [os.path.relpath(p, root) for p in html_files],
        'count': len(html_files),
    }


def notifyBuildEnd():
    """Announce that inlining will run once the bundle is written."""
    logger.info(f"{STAGE_TAG} Build ended. Will inline scripts once bundle is closed...")
