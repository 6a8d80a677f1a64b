"""CLI for the Cooperative Assessment Engine.

Provides command-line access to scoring submissions, browsing the
questionnaire, validating taxonomy documents and reporting over stored
results.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import (
    AssessmentConfig,
    find_config_file,
    get_config,
    load_config,
    save_default_config,
)
from .exceptions import AssessmentError, AssessmentValidationError
from .interpreter import InterpretationClassifier
from .logging_setup import setup_logging
from .pipeline import AssessmentPipeline, cooperative_score
from .recommender import match_axis_keyword
from .reporting import (
    average_overall_score,
    category_performance,
    cooperative_score_distribution,
    interpretation_distribution,
    overall_score_distribution,
    recommendation_frequency,
)
from .schema import AssessmentResult, Taxonomy
from .taxonomy import load_default_taxonomy, load_taxonomy, validate_taxonomy

console = Console()


def _load_taxonomy(path: Optional[str], config: AssessmentConfig) -> Taxonomy:
    """Taxonomy from --taxonomy, else the configured one, else the packaged one."""
    if path:
        return load_taxonomy(path)
    if config.taxonomy_path:
        return load_taxonomy(config.taxonomy_path)
    return load_default_taxonomy()


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version="1.0.0", prog_name="coop-assessment")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to assessment configuration YAML (default: auto-discovered)"
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level for engine diagnostics (written to stderr)"
)
def main(config_path: Optional[str], log_level: str):
    """Cooperative Self-Assessment Engine.

    Scores questionnaire answers against the assessment taxonomy and returns
    category scores, an overall interpretation and recommendations.
    """
    setup_logging(log_level)
    path = Path(config_path) if config_path else find_config_file()
    if path:
        load_config(path)


@main.command("assess")
@click.option(
    "--answers", "-a",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file: a list of answers, or {cooperativeId, answers}"
)
@click.option(
    "--taxonomy", "-t",
    type=click.Path(exists=True, dir_okay=False),
    help="Taxonomy document (default: configured or packaged taxonomy)"
)
@click.option(
    "--cooperative-id", "-c",
    help="Cooperative the answers belong to (overrides the file)"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for the JSON result"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
def assess_cmd(
    answers: str,
    taxonomy: Optional[str],
    cooperative_id: Optional[str],
    out: Optional[str],
    json_output: bool,
):
    """Score a submission.

    Examples:
        coop-assessment assess -a answers.json
        coop-assessment assess -a answers.json -c 42 -o result.json
    """
    try:
        config = get_config()
        pipeline = AssessmentPipeline(_load_taxonomy(taxonomy, config), config)

        payload = _read_json(answers)
        if isinstance(payload, dict):
            raw_answers = payload.get("answers")
            file_coop_id = payload.get("cooperativeId")
        else:
            raw_answers = payload
            file_coop_id = None

        result = pipeline.run(cooperative_id or file_coop_id, raw_answers)
    except AssessmentValidationError as e:
        _fail(f"Invalid submission: {e.message}")
    except (AssessmentError, OSError, ValueError) as e:
        _fail(str(e))

    if json_output:
        output_json(result_payload(result), out)
    else:
        display_result(result)
        if out:
            output_json(result_payload(result), out)
            console.print(f"\n[green]Result saved to {out}[/green]")


@main.command("questions")
@click.option(
    "--taxonomy", "-t",
    type=click.Path(exists=True, dir_okay=False),
    help="Taxonomy document (default: configured or packaged taxonomy)"
)
@click.option(
    "--category",
    help="Only show categories whose name contains this text"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
def questions_cmd(taxonomy: Optional[str], category: Optional[str], json_output: bool):
    """Show the questionnaire."""
    try:
        tax = _load_taxonomy(taxonomy, get_config())
    except AssessmentError as e:
        _fail(e.message)

    sections = tax.questionnaire()
    if category:
        needle = category.lower()
        sections = [s for s in sections if needle in s["category"].lower()]

    if json_output:
        click.echo(json.dumps(sections, indent=2, ensure_ascii=False))
        return

    if not sections:
        console.print("[yellow]No matching categories.[/yellow]")
        return

    for section in sections:
        console.print(f"\n[bold cyan]{section['category']}[/bold cyan]")
        for q in section["questions"]:
            console.print(f"  [bold]{q['id']}[/bold]. {q['question']}")
            if q["answer"]:
                console.print(f"     [dim]{q['answer']}[/dim]")


@main.command("validate")
@click.option(
    "--taxonomy", "-t",
    required=True,
    type=click.Path(),
    help="Taxonomy document to validate"
)
def validate_cmd(taxonomy: str):
    """Validate a taxonomy document.

    Examples:
        coop-assessment validate -t taxonomy.json
    """
    is_valid, issues = validate_taxonomy(taxonomy)
    if is_valid:
        console.print(f"[green]✓ Taxonomy valid: {taxonomy}[/green]")
        sys.exit(0)

    console.print(f"[red]✗ Taxonomy invalid: {taxonomy}[/red]")
    for issue in issues:
        console.print(f"  - {issue}")
    sys.exit(1)


@main.command("inspect")
@click.option(
    "--taxonomy", "-t",
    type=click.Path(exists=True, dir_okay=False),
    help="Taxonomy document (default: configured or packaged taxonomy)"
)
def inspect_cmd(taxonomy: Optional[str]):
    """Inspect categories, interpretation bands and recommendation axes."""
    try:
        tax = _load_taxonomy(taxonomy, get_config())
    except AssessmentError as e:
        _fail(e.message)

    console.print("\n[bold blue]Assessment Taxonomy[/bold blue]")
    if tax.source:
        console.print(f"Source: {tax.source}")
    console.print(f"Categories: {len(tax.categories)} | Questions: {tax.question_count}\n")

    categories = Table(show_header=True, header_style="bold")
    categories.add_column("Category", style="cyan")
    categories.add_column("Questions", justify="right")
    categories.add_column("Axis")
    axis_keywords = get_config().recommendations.axis_keywords
    for cat in tax.categories:
        axis = match_axis_keyword(cat.name, axis_keywords)
        if axis is not None and tax.get_axis(axis) is None:
            axis = f"{axis} (missing)"
        categories.add_row(cat.name, str(len(cat.questions)), axis or "[dim]-[/dim]")
    console.print(categories)

    bands = Table(show_header=True, header_style="bold", title="Interpretation Bands")
    bands.add_column("Min", justify="right")
    bands.add_column("Max", justify="right")
    bands.add_column("Label")
    for band in tax.scale_bands:
        bands.add_row(f"{band.range_min:.2f}", f"{band.range_max:.2f}", band.label)
    console.print(bands)

    axes = Table(show_header=True, header_style="bold", title="Recommendation Axes")
    axes.add_column("Axis", style="cyan")
    axes.add_column("Kind")
    axes.add_column("Entries", justify="right")
    for axis in tax.axes:
        kind = "tiered" if axis.is_tiered else "summary"
        entries = len(axis.tiered) if axis.is_tiered else len(axis.summary)
        axes.add_row(axis.name, kind, str(entries))
    console.print(axes)


@main.command("report")
@click.option(
    "--results", "-r",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file holding a list of stored result records"
)
@click.option(
    "--taxonomy", "-t",
    type=click.Path(exists=True, dir_okay=False),
    help="Taxonomy document (default: configured or packaged taxonomy)"
)
@click.option(
    "--top", "-n",
    default=10,
    type=int,
    help="Number of most frequent recommendation categories to list"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
def report_cmd(results: str, taxonomy: Optional[str], top: int, json_output: bool):
    """Aggregate statistics over stored results."""
    try:
        config = get_config()
        tax = _load_taxonomy(taxonomy, config)
        records = _read_json(results)
        if not isinstance(records, list):
            raise ValueError("Results file must hold a JSON array of records")
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise ValueError(f"Record #{index} must be an object")

        classifier = InterpretationClassifier(
            tax.scale_bands,
            config.interpretation.out_of_range_label,
        )
        factor = config.scoring.cooperative_score_factor
        performance = category_performance(records, classifier)
        report = {
            "total": len(records),
            "averageOverallScore": average_overall_score(records),
            "overallScoreDistribution": overall_score_distribution(records, classifier),
            "interpretationDistribution": interpretation_distribution(records),
            "cooperativeScoreDistribution": cooperative_score_distribution([
                cooperative_score(float(r["overallScore"]), factor)
                for r in records
                if r.get("overallScore") is not None
            ]),
            "categoryPerformance": performance.model_dump(),
            "topRecommendations": [
                f.model_dump() for f in recommendation_frequency(records, top=top)
            ],
        }
    except (AssessmentError, OSError, ValueError, TypeError, AttributeError) as e:
        _fail(str(e))

    if json_output:
        click.echo(json.dumps(report, indent=2, ensure_ascii=False))
        return

    display_report(report)


@main.command("init-config")
@click.option(
    "--out", "-o",
    default="assessment-config.yaml",
    type=click.Path(),
    help="Where to write the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite an existing file"
)
def init_config_cmd(out: str, force: bool):
    """Write the default configuration to a YAML file."""
    path = Path(out)
    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists (use --force to overwrite)[/yellow]")
        sys.exit(1)

    save_default_config(path)
    console.print(f"[green]Configuration written to {path}[/green]")


def result_payload(result: AssessmentResult) -> dict[str, Any]:
    """Record fields plus the derived cooperative score."""
    payload = result.to_record()
    payload["cooperativeScore"] = result.cooperative_score
    return payload


def display_result(result: AssessmentResult):
    """Display an assessment result in formatted text."""
    console.print(Panel(
        f"Cooperative: [bold]{result.cooperative_id if result.cooperative_id is not None else '-'}[/bold]\n"
        f"Overall Score: [bold cyan]{result.overall_score:.2f}[/bold cyan] / 5\n"
        f"Interpretation: [bold]{result.interpretation}[/bold]\n"
        f"Cooperative Score: {result.cooperative_score}",
        title="Assessment Summary",
    ))

    table = Table(show_header=True, header_style="bold", title="Scores by Category")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    for category, score in result.scores_by_category.items():
        table.add_row(category, f"{score:.2f}")
    console.print(table)

    if result.recommendations:
        console.print("\n[bold]Recommendations:[/bold]")
        for rec in result.recommendations:
            console.print(f"  [green]•[/green] {rec}")
    else:
        console.print("\n[dim]No recommendations for these categories.[/dim]")


def display_report(report: dict[str, Any]):
    """Display aggregated statistics in formatted text."""
    console.print(Panel(
        f"Results: [bold]{report['total']}[/bold]\n"
        f"Average Overall Score: [bold cyan]{report['averageOverallScore']:.2f}[/bold cyan]",
        title="Assessment Report",
    ))

    distribution = Table(show_header=True, header_style="bold", title="Overall Score Distribution")
    distribution.add_column("Band")
    distribution.add_column("Results", justify="right")
    for label, count in report["overallScoreDistribution"].items():
        distribution.add_row(label, str(count))
    console.print(distribution)

    perf = report["categoryPerformance"]
    if perf["categories"]:
        table = Table(show_header=True, header_style="bold", title="Category Performance (weakest first)")
        table.add_column("Category", style="cyan")
        table.add_column("Avg", justify="right")
        table.add_column("Min", justify="right")
        table.add_column("Max", justify="right")
        table.add_column("Std Dev", justify="right")
        table.add_column("n", justify="right")
        table.add_column("Level")
        for cat in perf["categories"]:
            table.add_row(
                cat["category"],
                f"{cat['average']:.2f}",
                f"{cat['min']:.2f}",
                f"{cat['max']:.2f}",
                f"{cat['standard_deviation']:.2f}",
                str(cat["assessment_count"]),
                cat["performance_level"],
            )
        console.print(table)

    if report["topRecommendations"]:
        console.print("\n[bold]Most Frequent Recommendation Categories:[/bold]")
        for entry in report["topRecommendations"]:
            console.print(
                f"  [yellow]•[/yellow] {entry['category']}: "
                f"{entry['count']} ({entry['percentage']:.2f}%)"
            )


def output_json(payload: dict[str, Any], out_path: Optional[str]):
    """Write a JSON payload to a file or stdout."""
    text = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        click.echo(text)


if __name__ == "__main__":
    main()
