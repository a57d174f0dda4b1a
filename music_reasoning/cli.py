"""Command-line interface for Music Reasoning.

Provides commands for:
- chord: Identify a chord from note names
- progression: Full progression analysis (key, numerals, cadences, genres)
- key: Detect the key of a progression
- genre: Rank genres for a progression
- scale: Show the notes and degrees of a scale
- build: Spell a chord symbol with a voicing and substitutions
"""

import logging
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .core import MusicTheoryError
from .engine import (
    analyze_progression,
    build_chord,
    detect_genre,
    detect_key,
    generate_voicing,
    get_scale,
    get_substitutions,
    identify,
)
from .inference.genre import GENRES
from .inference.voicing import VOICING_TYPES

app = typer.Typer(
    name="music-reasoning",
    help="Deterministic music theory analysis",
    rich_markup_mode="markdown",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def _fail(error: MusicTheoryError) -> NoReturn:
    console.print(f"[red]Error {error.code.value}: {escape(error.message)}[/red]")
    if error.suggestion:
        console.print(f"   [dim]{error.suggestion}[/dim]")
    raise typer.Exit(1)


@app.command()
def chord(
    notes: List[str] = typer.Argument(..., help="Note names, e.g. C E G"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Identify the chord formed by a set of notes.

    Examples:
        music-reasoning chord C E G
        music-reasoning chord G B D F --json
    """
    _setup_logging(verbose)
    try:
        result = identify(notes)
    except MusicTheoryError as e:
        _fail(e)

    if json_output:
        console.print_json(data=result.to_dict())
        return

    console.print(f"\n[bold blue]{result.chord}[/bold blue] ({result.symbol})")
    console.print(f"   Quality: {result.quality}")
    console.print(f"   Confidence: {result.confidence:.2f}")

    table = Table(title="Chord Tones")
    table.add_column("Note", style="cyan")
    table.add_column("Interval", style="green")
    table.add_column("Degree", style="yellow")
    for note, interval, degree in zip(result.notes, result.intervals, result.degrees):
        table.add_row(note, interval, str(degree))
    console.print(table)

    if len(result.alternatives) > 1:
        console.print(f"   Alternatives: {', '.join(result.alternatives[1:])}")


@app.command()
def progression(
    chords: List[str] = typer.Argument(..., help="Chord symbols, e.g. Dm7 G7 Cmaj7"),
    genre: Optional[str] = typer.Option(
        None, "--genre", "-g", help=f"Genre hint ({', '.join(GENRES)})"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Full progression analysis: key, Roman numerals, cadences and genres.

    Examples:
        music-reasoning progression C G Am F
        music-reasoning progression Dm7 G7 Cmaj7 --genre jazz
    """
    _setup_logging(verbose)
    try:
        result = analyze_progression(chords, genre=genre)
    except MusicTheoryError as e:
        _fail(e)

    if json_output:
        console.print_json(data=result.to_dict())
        return

    console.print(f"\n[bold blue]Key: {result.key}[/bold blue]")
    console.print(f"   Confidence: {result.confidence:.2f}")
    if result.key_info and result.key_info.relative_key:
        console.print(f"   Relative: {result.key_info.relative_key}")

    _show_analysis_table(result.analysis)

    console.print(f"\n   [green]Progression: {' - '.join(result.roman_numerals)}[/green]")
    for cadence in result.cadences:
        console.print(
            f"   Cadence: {cadence.type.value} ({' -> '.join(cadence.chords)}, {cadence.strength})"
        )
    for pattern in result.patterns:
        console.print(f"   Pattern: {pattern.name} [dim]({pattern.type})[/dim]")
    for suggestion in result.suggested_genres:
        console.print(f"   Genre: {suggestion.genre} ({suggestion.confidence:.2f})")
    if result.loopable:
        console.print("   [dim]Loops back to the tonic[/dim]")


@app.command()
def key(
    chords: List[str] = typer.Argument(..., help="Chord symbols"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Detect the key of a chord progression."""
    _setup_logging(verbose)
    try:
        key_info = detect_key(chords)
    except MusicTheoryError as e:
        _fail(e)

    if json_output:
        console.print_json(data=key_info.to_dict())
        return

    console.print(f"\n[green]Key: {key_info.name}[/green]")
    console.print(f"   Confidence: {key_info.confidence:.2f}")
    console.print(f"   Ambiguity: {key_info.ambiguity_score:.2f}")
    console.print(f"   Relative: {key_info.relative_key}")
    console.print(f"   Parallel: {key_info.parallel_key}")
    if key_info.alternatives:
        names = ", ".join(c.name for c in key_info.alternatives)
        console.print(f"   [dim]Alternatives: {names}[/dim]")


@app.command()
def genre(
    chords: List[str] = typer.Argument(..., help="Chord symbols"),
    hint: Optional[str] = typer.Option(
        None, "--genre", "-g", help=f"Restrict to one genre ({', '.join(GENRES)})"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Rank the genres whose characteristic patterns occur in a progression."""
    _setup_logging(verbose)
    try:
        results = detect_genre(chords, genre=hint)
    except MusicTheoryError as e:
        _fail(e)

    if json_output:
        console.print_json(data=[r.to_dict() for r in results])
        return

    table = Table(title="Genre Suggestions")
    table.add_column("Genre", style="cyan")
    table.add_column("Confidence", style="magenta")
    table.add_column("Patterns", style="green")
    for result in results:
        table.add_row(
            result.genre,
            f"{result.confidence:.2f}",
            ", ".join(p.pattern for p in result.matched_patterns) or "-",
        )
    console.print(table)


@app.command()
def scale(
    root: str = typer.Argument(..., help="Root note, e.g. C or F#"),
    scale_type: str = typer.Argument("major", help="Scale type, e.g. major, dorian, 'harmonic minor'"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Show the notes, intervals and degrees of a scale."""
    _setup_logging(verbose)
    try:
        info = get_scale(root, scale_type)
    except MusicTheoryError as e:
        _fail(e)

    if json_output:
        console.print_json(data=info.to_dict())
        return

    console.print(f"\n[bold blue]{info.scale}[/bold blue]  [dim]{info.formula}[/dim]")
    table = Table(title="Scale Degrees")
    table.add_column("Degree", style="yellow")
    table.add_column("Note", style="cyan")
    table.add_column("Interval", style="green")
    table.add_column("Name", style="magenta")
    for degree, interval in zip(info.degrees, info.intervals):
        table.add_row(str(degree.degree), degree.note, interval, degree.name)
    console.print(table)

    for label, value in (
        ("Relative minor", info.relative_minor),
        ("Relative major", info.relative_major),
        ("Parallel minor", info.parallel_minor),
        ("Parallel major", info.parallel_major),
    ):
        if value:
            console.print(f"   {label}: {value}")
    if info.modes:
        console.print(f"   Modes: {', '.join(info.modes)}")


@app.command()
def build(
    symbol: str = typer.Argument(..., help="Chord symbol, e.g. Cmaj7 or F#m7b5"),
    voicing: str = typer.Option(
        "close", "--voicing", "-t", help=f"Voicing type ({', '.join(VOICING_TYPES)})"
    ),
    octave: int = typer.Option(4, "--octave", "-o", help="Octave of the lowest chord tone"),
    inversion: int = typer.Option(0, "--inversion", "-i", help="Inversion (0 = root position)"),
    enharmonic: str = typer.Option(
        "preserve", "--enharmonic", "-e", help="preserve, sharps or flats"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Spell a chord symbol with a voicing and common substitutions.

    Examples:
        music-reasoning build Cmaj7
        music-reasoning build Dm7 --voicing drop2 --octave 3
    """
    _setup_logging(verbose)
    try:
        result = build_chord(symbol, voicing=voicing, octave=octave, enharmonic=enharmonic)
        voiced = result.voicing.notes
        if inversion:
            voiced = generate_voicing(symbol, voicing=voicing, octave=octave, inversion=inversion)
        substitutions = get_substitutions(symbol)
    except MusicTheoryError as e:
        _fail(e)

    if json_output:
        data = result.to_dict()
        data["voicing"]["notes"] = voiced
        data["substitutions"] = [s.to_dict() for s in substitutions]
        console.print_json(data=data)
        return

    console.print(f"\n[bold blue]{result.chord}[/bold blue] ({result.quality})")
    if len(result.enharmonics) > 1:
        console.print(f"   Root: {' / '.join(result.enharmonics)}")

    table = Table(title="Chord Tones")
    table.add_column("Note", style="cyan")
    table.add_column("Interval", style="green")
    table.add_column("Degree", style="yellow")
    for note, interval, degree in zip(result.notes, result.intervals, result.degrees):
        table.add_row(note, interval, str(degree))
    console.print(table)

    console.print(f"   Voicing ({voicing}): {' '.join(voiced)}")
    for substitution in substitutions:
        console.print(f"   Substitute: {substitution.chord} [dim]{substitution.reason}[/dim]")


def _show_analysis_table(analysis):
    """Display per-chord analysis in a table."""
    table = Table(title="Harmonic Analysis")
    table.add_column("Chord", style="cyan")
    table.add_column("Roman", style="green")
    table.add_column("Function", style="yellow")
    table.add_column("Notes", style="magenta")

    for item in analysis:
        remarks = []
        if item.borrowed:
            remarks.append(f"borrowed from {item.borrowed_from}")
        if item.secondary_dominant:
            remarks.append(item.secondary_dominant)
        table.add_row(item.chord, item.roman, item.function.value, ", ".join(remarks))

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
