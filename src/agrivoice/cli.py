"""CLI for AgriVoice."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from agrivoice import __version__
from agrivoice.config import AgriVoiceConfig, load_config, save_config
from agrivoice.dictionary import TermNormalizer, default_dictionary
from agrivoice.errors import FailureNotice
from agrivoice.inference import (
    CROP_TYPE_LABELS,
    WORK_TYPE_LABELS,
    FieldInferenceEngine,
    InferredFields,
    RecordDraft,
    apply_inferred,
)
from agrivoice.location import (
    CachedLocationProvider,
    Coordinate,
    FieldRegistry,
    FixedLocationProvider,
    LocationHistory,
    LocationProvider,
    LocationProximityMatcher,
    format_coordinate,
    is_location_accurate,
)
from agrivoice.logging import SessionLogger, analyze_logs
from agrivoice.recognition import ScriptedSpeechSource, VoiceRecordExtractor

app = typer.Typer(
    name="agrivoice",
    help="Turn spoken farm-work transcripts into structured work records.",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# CLI Helpers
# =============================================================================

def _cli_error(message: str, detail: str | None = None) -> None:
    """Print formatted error message to console."""
    if detail:
        console.print(f"[red]Error:[/red] {message}: {detail}")
    else:
        console.print(f"[red]Error:[/red] {message}")


def _print_notice(notice: FailureNotice) -> None:
    console.print(f"[yellow]{notice.category}:[/yellow] {notice.message}")


def _normalizer(config: AgriVoiceConfig) -> TermNormalizer:
    return TermNormalizer(default_dictionary(config.inference.custom_terms))


def _engine(config: AgriVoiceConfig) -> FieldInferenceEngine:
    return FieldInferenceEngine(field_name_template=config.inference.field_name_template)


def _matcher(config: AgriVoiceConfig) -> LocationProximityMatcher:
    return LocationProximityMatcher(threshold_km=config.location.proximity_threshold_km)


def _location_provider(config: AgriVoiceConfig, provider: LocationProvider) -> CachedLocationProvider:
    return CachedLocationProvider(
        provider,
        timeout_seconds=config.location.timeout_seconds,
        maximum_age_seconds=config.location.maximum_age_seconds,
    )


def _coordinate(lat: float, lng: float, accuracy: float | None) -> Coordinate:
    try:
        return Coordinate(latitude=lat, longitude=lng, accuracy_meters=accuracy)
    except ValueError as e:
        _cli_error("Invalid coordinate", str(e))
        raise typer.Exit(1)


def _fields_table(fields: InferredFields) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column(style="dim")
    table.add_column()
    work = fields.work_type
    crop = fields.crop_type
    table.add_row("work_type", f"{work} ({WORK_TYPE_LABELS[work]})" if work else "-")
    table.add_row("crop_type", f"{crop} ({CROP_TYPE_LABELS[crop]})" if crop else "-")
    table.add_row("field_name", fields.field_name or "-")
    table.add_row("quantity", fields.quantity or "-")
    return table


# =============================================================================
# Commands
# =============================================================================

@app.command()
def version():
    """Show version."""
    console.print(f"agrivoice {__version__}")


@app.command()
def normalize(
    text: Annotated[str, typer.Argument(help="Raw transcript text")],
):
    """Normalize agricultural terms in a transcript."""
    config = load_config()
    console.print(_normalizer(config).normalize(text))


@app.command()
def infer(
    text: Annotated[str, typer.Argument(help="Raw transcript text")],
    details: Annotated[
        str,
        typer.Option("--details", help="Existing work-details text (kept if non-empty)")
    ] = "",
):
    """Infer work-record fields from one utterance."""
    config = load_config()
    normalized = _normalizer(config).normalize(text)
    fields = _engine(config).infer(normalized, raw_text=text)
    draft = apply_inferred(RecordDraft(work_details=details), fields)

    console.print(f"[bold]Normalized:[/bold] {normalized}")
    console.print(_fields_table(fields))
    console.print(f"[dim]work_details:[/dim] {draft.work_details}")


@app.command()
def listen(
    script: Annotated[Path, typer.Argument(help="Transcript script ('~' interim, '!' error)")],
    no_log: Annotated[
        bool,
        typer.Option("--no-log", help="Do not write a session log")
    ] = False,
):
    """Replay a transcript script through a recording session."""
    if not script.exists():
        _cli_error("Script not found", str(script))
        raise typer.Exit(1)

    config = load_config()
    session_logger = None if no_log else SessionLogger(logs_dir=config.logs_dir)
    notices: list[FailureNotice] = []
    draft = RecordDraft()

    extractor = VoiceRecordExtractor(
        normalizer=_normalizer(config),
        engine=_engine(config),
        registry=FieldRegistry(config.fields_file),
        matcher=_matcher(config),
        speech_source=ScriptedSpeechSource.from_file(
            script,
            continuous=config.recognition.continuous,
            interim_results=config.recognition.interim_results,
        ),
        session_logger=session_logger,
        on_failure=notices.append,
    )

    if not extractor.start():
        for notice in notices:
            _print_notice(notice)
        raise typer.Exit(1)

    for index, fields in enumerate(extractor.listen(), start=1):
        draft = apply_inferred(draft, fields)
        console.print(f"[bold]Utterance {index}:[/bold] {fields.normalized_text}")
        console.print(_fields_table(fields))

    for notice in notices:
        _print_notice(notice)

    console.print()
    console.print("[bold]Record draft:[/bold]")
    for key, value in draft.model_dump().items():
        console.print(f"  [dim]{key}:[/dim] {value if value else '-'}")

    if session_logger is not None:
        summary = session_logger.finalize()
        console.print(
            f"[dim]Session: {summary['utterances']} utterances, "
            f"{summary['recognition_errors']} errors ({session_logger.log_file.name})[/dim]"
        )


@app.command()
def terms(
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="crop, work, disease, pest or unit")
    ] = None,
):
    """List the term dictionary."""
    config = load_config()
    dictionary = default_dictionary(config.inference.custom_terms)
    entries = dictionary.by_category(category) if category else list(dictionary)

    table = Table("spoken", "normalized", "category")
    for entry in entries:
        table.add_row(entry.spoken, entry.normalized, entry.category)
    console.print(table)


@app.command(name="field-add")
def field_add(
    name: Annotated[str, typer.Argument(help="Field name")],
    lat: Annotated[float, typer.Option("--lat", help="Latitude")],
    lng: Annotated[float, typer.Option("--lng", help="Longitude")],
    accuracy: Annotated[
        Optional[float],
        typer.Option("--accuracy", help="Fix accuracy in meters")
    ] = None,
    work_type: Annotated[
        Optional[str],
        typer.Option("--work-type", "-w", help="Work done at this position (kept in location history)")
    ] = None,
):
    """Register (or move) a known field."""
    config = load_config()
    location = _coordinate(lat, lng, accuracy)
    if accuracy is not None and not is_location_accurate(
        location, config.location.required_accuracy_meters
    ):
        console.print(
            f"[yellow]Warning:[/yellow] accuracy ±{accuracy:.0f}m exceeds "
            f"{config.location.required_accuracy_meters:.0f}m"
        )

    try:
        FieldRegistry(config.fields_file).upsert(name, location)
        LocationHistory(config.history_file, limit=config.location.history_limit).record(
            location, work_type
        )
    except ValueError as e:
        _cli_error("Could not register field", str(e))
        raise typer.Exit(1)
    console.print(f"[green]Saved:[/green] {name} ({format_coordinate(location)})")


@app.command()
def fields():
    """List known fields."""
    config = load_config()
    registry = FieldRegistry(config.fields_file)
    if len(registry) == 0:
        console.print("[dim]No known fields.[/dim]")
        return

    table = Table("name", "latitude", "longitude", "accuracy")
    for field in registry.all():
        loc = field.location
        accuracy = f"±{loc.accuracy_meters:.0f}m" if loc.accuracy_meters is not None else "-"
        table.add_row(field.name, f"{loc.latitude:.6f}", f"{loc.longitude:.6f}", accuracy)
    console.print(table)


@app.command()
def history():
    """Summarize where work has been recorded."""
    config = load_config()
    stats = LocationHistory(config.history_file, limit=config.location.history_limit).statistics()
    if stats.total_records == 0:
        console.print("[dim]No location history.[/dim]")
        return

    console.print(f"[bold]Records:[/bold] {stats.total_records}")
    console.print(f"[bold]Average accuracy:[/bold] {stats.average_accuracy:.1f}m")
    table = Table("location", "work types")
    for key, work_types in stats.work_types_by_location.items():
        table.add_row(key, ", ".join(w or "-" for w in work_types))
    console.print(table)


@app.command()
def suggest(
    lat: Annotated[float, typer.Option("--lat", help="Latitude")],
    lng: Annotated[float, typer.Option("--lng", help="Longitude")],
):
    """Suggest a field name for the given position."""
    config = load_config()
    current = _coordinate(lat, lng, None)
    registry = FieldRegistry(config.fields_file)
    matcher = _matcher(config)
    notices: list[FailureNotice] = []

    extractor = VoiceRecordExtractor(
        normalizer=_normalizer(config),
        engine=_engine(config),
        registry=registry,
        matcher=matcher,
        location_provider=_location_provider(config, FixedLocationProvider(current)),
        on_failure=notices.append,
        location_timeout_seconds=config.location.timeout_seconds,
    )

    suggestion = extractor.locate_and_suggest()
    if notices:
        for notice in notices:
            _print_notice(notice)
        raise typer.Exit(1)

    nearest = matcher.nearest(current, registry.all())
    if suggestion is not None:
        console.print(f"[green]{suggestion}[/green]")
    elif nearest is not None:
        console.print(
            f"[dim]No field within {config.location.proximity_threshold_km * 1000:.0f}m "
            f"(nearest: {nearest.field.name}, {nearest.distance_km * 1000:.0f}m)[/dim]"
        )
    else:
        console.print("[dim]No known fields.[/dim]")


@app.command(name="config")
def config_cmd(
    show: Annotated[
        bool,
        typer.Option("--show", help="Show current configuration")
    ] = False,
    reset: Annotated[
        bool,
        typer.Option("--reset", help="Reset to default configuration")
    ] = False,
):
    """Manage AgriVoice configuration."""
    from agrivoice.config import CONFIG_FILE

    if reset:
        save_config(AgriVoiceConfig())
        console.print("[green]Configuration reset to defaults.[/green]")
        show = True

    if show:
        config = load_config()
        console.print(f"[bold]Configuration:[/bold] {CONFIG_FILE}")
        console.print()
        for key, value in config.model_dump().items():
            if isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    console.print(f"  [dim]{key}.{sub_key}:[/dim] {sub_value}")
            else:
                console.print(f"  [dim]{key}:[/dim] {value}")


@app.command()
def logs(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Sessions to analyze")] = 10,
):
    """Summarize recent session logs."""
    config = load_config()
    report = analyze_logs(config.logs_dir, limit=limit)
    if "error" in report:
        console.print(f"[dim]{report['error']}[/dim]")
        return

    console.print(f"[bold]Sessions analyzed:[/bold] {report['sessions_analyzed']}")
    console.print(f"[bold]Utterances:[/bold] {report['total_utterances']}")
    for member, rate in report["fill_rates"].items():
        console.print(f"  [dim]{member}:[/dim] {'-' if rate is None else f'{rate}%'}")
    for kind, count in report["common_errors"]:
        console.print(f"  [dim]error {kind}:[/dim] {count}")


if __name__ == "__main__":
    app()
