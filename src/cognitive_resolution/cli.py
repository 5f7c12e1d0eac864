"""Command line interface for Cognitive Resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from .config import load_config
from .diagnostics import DiagnosticsSuite
from .knowledge import KnowledgeStore, load_default_store, query_tokens
from .logging import configure_logging
from .memory import PersonalFactsView
from .pipeline import CognitivePipeline
from .utils.io import load_yaml_or_json
from .utils.text import format_number

LOGGER = configure_logging(logger_name=__name__)

UTTERANCE_ARGUMENT = typer.Argument(..., help="Utterance to resolve.")
QUERY_ARGUMENT = typer.Argument(..., help="Text to rank knowledge entries against.")
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="Path to pipeline configuration (YAML or JSON).",
)
KNOWLEDGE_OPTION = typer.Option(
    None,
    "--knowledge",
    help="Seed knowledge file; defaults to the bundled seed data.",
)
FACTS_OPTION = typer.Option(
    None,
    "--facts",
    help="JSON or YAML mapping of known personal facts.",
)
TRACE_OPTION = typer.Option(False, "--trace", help="Print the reasoning trace.")
JSON_OPTION = typer.Option(False, "--json", help="Emit the full response as JSON.")
TOP_K_OPTION = typer.Option(5, "--top-k", min=1, help="Maximum number of hits to show.")
DIAG_OUTPUT_OPTION = typer.Option(
    None,
    "--output",
    help="Optional path to write diagnostics report.",
)

app = typer.Typer(
    help="Resolve utterances into answers with confidence and an auditable reasoning trace."
)


def _load_facts(path: Optional[Path]) -> PersonalFactsView:
    if path is None:
        return PersonalFactsView()
    payload = load_yaml_or_json(Path(path))
    if payload is None:
        return PersonalFactsView()
    if not isinstance(payload, dict):
        msg = "Expected a mapping of personal facts"
        raise TypeError(msg)
    return PersonalFactsView(payload)


def _build_pipeline(config_path: Optional[Path], knowledge_path: Optional[Path]) -> CognitivePipeline:
    config = load_config(config_path)
    seed_path = knowledge_path or config.knowledge.seed_path
    return CognitivePipeline(load_default_store(seed_path), config)


@app.command()
def resolve(
    utterance: str = UTTERANCE_ARGUMENT,
    facts_path: Optional[Path] = FACTS_OPTION,
    knowledge_path: Optional[Path] = KNOWLEDGE_OPTION,
    config_path: Optional[Path] = CONFIG_OPTION,
    trace: bool = TRACE_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Resolve a single utterance."""

    pipeline = _build_pipeline(config_path, knowledge_path)
    try:
        response = pipeline.resolve(utterance, _load_facts(facts_path))
    except (TypeError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    if as_json:
        typer.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False, allow_nan=False))
        return
    typer.echo(response.content)
    typer.echo(f"confidence: {response.confidence:.2f} ({response.category})")
    for suggestion in response.suggestions:
        typer.echo(f"remember: {suggestion.key} = {suggestion.value}")
    if trace:
        for line in response.reasoning:
            typer.echo(f"  {line}")


@app.command()
def knowledge(
    query: str = QUERY_ARGUMENT,
    knowledge_path: Optional[Path] = KNOWLEDGE_OPTION,
    top_k: int = TOP_K_OPTION,
) -> None:
    """Show the knowledge entries ranked against QUERY."""

    store: KnowledgeStore = load_default_store(knowledge_path)
    hits = store.query(query_tokens(query), top_k=top_k)
    if not hits:
        typer.echo("No matching knowledge.")
        return
    for hit in hits:
        typer.echo(f"{format_number(round(hit.score, 3))}\t{hit.entry.key}\t{hit.entry.description}")


@app.command()
def diagnostics(
    config_path: Optional[Path] = CONFIG_OPTION,
    knowledge_path: Optional[Path] = KNOWLEDGE_OPTION,
    output: Optional[Path] = DIAG_OUTPUT_OPTION,
) -> None:
    """Run the probe suite and optionally export it to JSON."""

    suite = DiagnosticsSuite(pipeline=_build_pipeline(config_path, knowledge_path))
    result = suite.run()
    report: dict[str, Any] = result.to_dict()
    typer.echo(json.dumps(report, indent=2, ensure_ascii=False, allow_nan=False))
    if output is not None:
        result.to_json(output)
        LOGGER.info("Wrote diagnostics to %s", output)


if __name__ == "__main__":
    app()
