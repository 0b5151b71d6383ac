"""Main CLI interface using Typer."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeElapsedColumn
from rich.table import Table

from readerfirst import __version__
from readerfirst.core.exceptions import ReaderFirstError
from readerfirst.core.pipeline import ChunkTranslationPipeline, PipelineConfig
from readerfirst.document.html import parse_html_document
from readerfirst.enhancement import LocalEnhancementBackend, SectionEnhancementPipeline, create_enhancer, strip_tags
from readerfirst.study import StudyAssistant
from readerfirst.translation.glossary.manager import domain_keywords, protected_terms
from readerfirst.utils.cache import ENHANCEMENTS, TRANSLATIONS, TranslationCache
from readerfirst.utils.config_loader import load_config
from readerfirst.utils.logger import setup_logger
from readerfirst.vision import ImageCaptioner, enrich_images_with_captions

app = typer.Typer(
    name="readerfirst",
    help="ReaderFirst: AI translation and enhancement for documents",
    add_completion=False
)

console = Console()


def _load(config_file: Optional[Path]) -> dict:
    """Load YAML/env configuration and set up logging from it."""
    config = load_config(str(config_file) if config_file else None)
    log_settings = config.get("logging", {}) or {}
    setup_logger(level=log_settings.get("level", "INFO"), log_file=log_settings.get("file"))
    return config


def _settings(config_file: Optional[Path]) -> PipelineConfig:
    return PipelineConfig.from_dict(_load(config_file))


def _read_input(input_file: Path) -> str:
    if not input_file.exists():
        console.print(f"[red]Error: Input file not found: {input_file}[/red]")
        raise typer.Exit(1)
    return input_file.read_text(encoding="utf-8")


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=30),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False
    )


def _fail(error: Exception) -> None:
    if isinstance(error, ReaderFirstError):
        console.print(f"[red]Error: {escape(error.message)}[/red]")
        if error.suggestion:
            console.print(f"[yellow]{error.suggestion}[/yellow]")
    else:
        console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


@app.command()
def translate(
    input_file: Path = typer.Argument(..., help="Input HTML file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file path"),
    provider: Optional[str] = typer.Option(None, "-p", "--provider", help="Translation provider (openai/deepl)"),
    model: Optional[str] = typer.Option(None, "-m", "--model", help="Chat model for the openai provider"),
    target_lang: Optional[str] = typer.Option(None, "-t", "--target", help="Target language"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Chunks translated at once"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Translate an HTML document chunk by chunk."""

    html = _read_input(input_file)
    if output is None:
        output = input_file.with_name(f"{input_file.stem}_translated.html")

    config = _load(config_file)
    overrides = {"provider": provider, "model": model, "target_lang": target_lang, "max_concurrency": concurrency}
    config["translation"].update({k: v for k, v in overrides.items() if v})
    settings = PipelineConfig.from_dict(config)

    console.print(f"[bold blue]ReaderFirst Translation[/bold blue]")
    console.print(f"Input: {input_file}")
    console.print(f"Output: {output}")
    console.print(f"Provider: {settings.provider} → {settings.target_lang}\n")

    document = parse_html_document(html, title_fallback=input_file.stem)

    try:
        with _progress() as progress:
            task = progress.add_task("[cyan]Translating...", total=100)

            def progress_callback(percent: int, message: str):
                progress.update(task, completed=percent, description=f"[cyan]{message}")

            async def run():
                async with ChunkTranslationPipeline(settings, progress_callback=progress_callback) as pipeline:
                    translated = await pipeline.translate_document(document)
                    return translated, pipeline.get_stats()

            translated_html, stats = asyncio.run(run())
            progress.update(task, completed=100, description="[green]✓ Translation complete")
    except Exception as e:
        _fail(e)

    output.write_text(translated_html, encoding="utf-8")

    console.print("\n[bold green]Translation Complete![/bold green]")
    console.print(f"Output: {output}")
    console.print(f"Chunks: {len(document.text_chunks)}  Cache hits: {stats['cache_hits']}  API calls: {stats['api_calls']}")
    if stats["degraded"]:
        console.print(f"[yellow]{stats['degraded']} chunks kept their original text[/yellow]")


@app.command()
def enhance(
    input_file: Path = typer.Argument(..., help="Input HTML file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file path"),
    title: Optional[str] = typer.Option(None, "--title", help="Document title passed to the model"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Rewrite each section for readability and prepend an executive summary."""

    html = _read_input(input_file)
    if output is None:
        output = input_file.with_name(f"{input_file.stem}_enhanced.html")

    config = _load(config_file)
    settings = PipelineConfig.from_dict(config)
    ai_enabled = (config.get("enhancement", {}) or {}).get("enabled", True)
    title = title or parse_html_document(html, title_fallback=input_file.stem).title

    cache = TranslationCache(
        cache_dir=str(settings.cache_dir),
        namespace=ENHANCEMENTS,
        use_disk=settings.use_disk_cache,
    )
    enhancer = create_enhancer(
        api_key=settings.enhancement_api_key,
        model=settings.model,
        base_url=settings.openai_base_url,
        retry=settings.retry_policy,
        timeout=settings.timeout,
    ) if ai_enabled else LocalEnhancementBackend()

    with _progress() as progress:
        task = progress.add_task("[cyan]Enhancing...", total=100)

        def progress_callback(percent: int, message: str):
            progress.update(task, completed=percent, description=f"[cyan]{message}")

        pipeline = SectionEnhancementPipeline(
            enhancer,
            cache=cache,
            max_takeaways=settings.max_takeaways,
            progress_callback=progress_callback,
        )

        async def run():
            try:
                return await pipeline.enhance_document(html, title)
            finally:
                await enhancer.aclose()
                cache.close()

        result = asyncio.run(run())
        progress.update(task, completed=100, description="[green]✓ Enhancement complete")

    output.write_text(result.html, encoding="utf-8")

    console.print(f"\n[bold green]Enhanced {result.sections} sections[/bold green]")
    console.print(f"Output: {output}")
    if result.glossary_hits:
        console.print(f"Glossary: {', '.join(result.glossary_hits)}")


def _study_context(input_file: Path) -> str:
    return strip_tags(_read_input(input_file))


def _assistant(config_file: Optional[Path]) -> StudyAssistant:
    settings = _settings(config_file)
    return StudyAssistant(
        api_key=settings.enhancement_api_key,
        model=settings.model,
        base_url=settings.openai_base_url,
        retry=settings.retry_policy,
        timeout=settings.timeout,
    )


def _run_study(assistant: StudyAssistant, coro):
    async def run():
        try:
            return await coro
        finally:
            await assistant.aclose()

    try:
        return asyncio.run(run())
    except (ReaderFirstError, ValueError) as e:
        _fail(e)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about the document"),
    input_file: Path = typer.Option(..., "-i", "--input", help="Document to answer from (HTML or text)"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Answer a question from a document's text."""
    context = _study_context(input_file)
    assistant = _assistant(config_file)
    answer = _run_study(assistant, assistant.ask(question, context))
    console.print(answer)


@app.command()
def flashcards(
    input_file: Path = typer.Argument(..., help="Document to study (HTML or text)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Generate flashcards from a document."""
    context = _study_context(input_file)
    assistant = _assistant(config_file)
    cards = _run_study(assistant, assistant.flashcards(context))

    if as_json:
        typer.echo(json.dumps([card.to_dict() for card in cards], ensure_ascii=False, indent=2))
        return

    table = Table(title="Flashcards", show_header=True, header_style="bold cyan")
    table.add_column("Front")
    table.add_column("Back")
    for card in cards:
        table.add_row(card.front, card.back)
    console.print(table)


@app.command()
def quiz(
    input_file: Path = typer.Argument(..., help="Document to study (HTML or text)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a list"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Generate a multiple-choice quiz from a document."""
    context = _study_context(input_file)
    assistant = _assistant(config_file)
    items = _run_study(assistant, assistant.quiz(context))

    if as_json:
        typer.echo(json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2))
        return

    for number, item in enumerate(items, 1):
        console.print(f"\n[bold]{number}. {item.question}[/bold]")
        for option in item.options:
            console.print(f"   • {option}")
        console.print(f"   [green]Answer: {item.answer}[/green]")


@app.command()
def caption(
    input_file: Path = typer.Argument(..., help="Input HTML file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file path"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Caption embedded images in English and Portuguese."""
    html = _read_input(input_file)
    if output is None:
        output = input_file.with_name(f"{input_file.stem}_captioned.html")

    settings = _settings(config_file)
    if not settings.enhancement_api_key:
        console.print("[yellow]No OpenAI API key configured; images left unchanged[/yellow]")

    captioner = ImageCaptioner(
        api_key=settings.enhancement_api_key,
        model=settings.model,
        base_url=settings.openai_base_url,
        retry=settings.retry_policy,
        timeout=settings.timeout,
    )
    prepared = parse_html_document(html, title_fallback=input_file.stem).html

    async def run():
        try:
            return await enrich_images_with_captions(prepared, captioner)
        finally:
            await captioner.aclose()

    output.write_text(asyncio.run(run()), encoding="utf-8")
    console.print(f"[green]✓ Output saved:[/green] {output}")


@app.command()
def cache(
    action: str = typer.Argument(..., help="Action: stats, clear"),
    namespace: Optional[str] = typer.Option(None, "-n", "--namespace", help="Cache namespace (default: all)"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
):
    """Inspect or clear the translation and enhancement caches."""
    settings = _settings(config_file)
    namespaces = [namespace] if namespace else [settings.cache_namespace, ENHANCEMENTS]
    if not namespace and settings.cache_namespace != TRANSLATIONS:
        namespaces.insert(0, TRANSLATIONS)

    if action not in ("stats", "clear"):
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: stats, clear")
        raise typer.Exit(1)

    table = Table(title="Cache", show_header=True, header_style="bold cyan")
    table.add_column("Namespace", no_wrap=True)
    table.add_column("Type")
    table.add_column("Entries", justify="right")
    table.add_column("Location", overflow="fold")

    for name in namespaces:
        store = TranslationCache(cache_dir=str(settings.cache_dir), namespace=name, use_disk=settings.use_disk_cache)
        try:
            if action == "clear":
                store.clear()
                console.print(f"[green]✓ Cleared {name}[/green]")
            else:
                stats = store.get_stats()
                table.add_row(name, stats["type"], str(stats["size"]), stats.get("location", "memory"))
        finally:
            store.close()

    if action == "stats":
        console.print(table)


@app.command()
def glossary(
    action: str = typer.Argument(..., help="Action: list, guard"),
    text: Optional[str] = typer.Argument(None, help="Text to guard (for 'guard')"),
):
    """Show protected terms or apply the glossary guard to text."""

    if action == "list":
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Term")
        table.add_column("Use")
        keywords = domain_keywords()
        for term in protected_terms().terms.values():
            table.add_row(term.target, "protected, keyword" if term.source in keywords else "protected")
        for term in keywords.terms.values():
            if term.source not in protected_terms():
                table.add_row(term.target, "keyword")
        console.print(table)

    elif action == "guard":
        if not text:
            console.print("[red]Error: 'guard' needs the text to guard[/red]")
            raise typer.Exit(1)
        typer.echo(protected_terms().guard_text(text))

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: list, guard")
        raise typer.Exit(1)


@app.command()
def version():
    """Show the installed version."""
    console.print(f"readerfirst {__version__}")


def cli():
    """Main CLI entry point."""
    if len(sys.argv) == 1:
        console.print(f"[bold blue]ReaderFirst {__version__}[/bold blue]")
        console.print("\n[dim]Type 'readerfirst --help' for usage information[/dim]\n")
        return

    app()


if __name__ == "__main__":
    cli()
