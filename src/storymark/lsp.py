"""Minimal LSP server for story markup: authoring diagnostics only."""

from __future__ import annotations

from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from storymark import __version__
from storymark.cli import load_config
from storymark.errors import ConfigError, Severity
from storymark.lint import lint
from storymark.registry import DEFAULT_REGISTRY, StyleRegistry

server = LanguageServer(
    "storymark-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)

_SEVERITIES = {
    Severity.WARNING: DiagnosticSeverity.Warning,
    Severity.INFO: DiagnosticSeverity.Information,
    Severity.HINT: DiagnosticSeverity.Hint,
}


def _registry_for(path: str | None) -> StyleRegistry:
    """Registry for a document, honouring a storymark.toml beside it."""
    if not path:
        return DEFAULT_REGISTRY
    return DEFAULT_REGISTRY.with_overrides(load_config(None, Path(path).parent))


def _validate(ls: LanguageServer, uri: str) -> None:
    """Lint the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    try:
        registry = _registry_for(doc.path)
    except ConfigError as exc:
        registry = DEFAULT_REGISTRY
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=0, character=0),
                    end=Position(line=0, character=0),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="storymark",
            )
        )

    for found in lint(source, filename, registry):
        start, end = found.span.start, found.span.end
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=start.line - 1, character=start.column - 1),
                    end=Position(line=end.line - 1, character=end.column - 1),
                ),
                message=found.message,
                severity=_SEVERITIES[found.severity],
                code=found.code,
                source="storymark",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
