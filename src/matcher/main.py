"""
Matcher CLI - Main entry point.
Scores CV components against job descriptions, builds drafts and variants,
and maintains component embeddings.
"""

import asyncio
import json
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

import click
from loguru import logger

from embeddings.backfill import EmbeddingBackfill
from embeddings.provider import CachedEmbeddingProvider, OpenAIEmbeddingProvider
from generator.cv_builder import CVGenerator
from generator.jd_extractor import JobDescriptionExtractor
from generator.llm import OpenAIGenerativeModel
from generator.selector import ComponentSelector
from generator.summary import ProfessionalSummaryWriter
from generator.variants import CVVariantGenerator, suggest_focus_areas
from shared.config import Settings, get_settings
from shared.database import Database
from shared.errors import public_error
from shared.library import load_library
from shared.logging_config import setup_logging
from shared.models import FocusArea

from .engine import MatchEngine
from .retriever import RelevanceRetriever


@dataclass
class Services:
    settings: Settings
    db: Database
    retriever: RelevanceRetriever
    engine: MatchEngine
    backfill: EmbeddingBackfill
    selector: ComponentSelector
    extractor: JobDescriptionExtractor
    summaries: ProfessionalSummaryWriter


@asynccontextmanager
async def open_services(settings: Optional[Settings] = None) -> AsyncIterator[Services]:
    """Connect to MongoDB and wire the OpenAI-backed services."""
    settings = settings or get_settings()
    db = Database(settings)
    await db.connect()

    embedder = CachedEmbeddingProvider.from_settings(OpenAIEmbeddingProvider(settings), settings)
    retriever = RelevanceRetriever(db, embedder, settings)
    try:
        yield Services(
            settings=settings,
            db=db,
            retriever=retriever,
            engine=MatchEngine(retriever, settings=settings),
            backfill=EmbeddingBackfill(db, embedder, settings),
            selector=ComponentSelector(OpenAIGenerativeModel(settings), settings),
            extractor=JobDescriptionExtractor(
                OpenAIGenerativeModel(settings, model=settings.openai_model_mini)
            ),
            summaries=ProfessionalSummaryWriter(OpenAIGenerativeModel(settings, temperature=0.7)),
        )
    finally:
        await db.disconnect()


def _read_job(job: Optional[str], job_file: Optional[Any]) -> str:
    if job_file is not None:
        return job_file.read()
    return job or ""


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _run(action: Callable[[Services], Awaitable[Any]], failure: str) -> Any:
    """Run an async action with services, printing a public error on failure."""
    settings = get_settings()

    async def runner():
        async with open_services(settings) as services:
            return await action(services)

    try:
        return asyncio.run(runner())
    except Exception as e:
        logger.exception(f"{failure}: {e}")
        _echo_json(public_error(e, settings.is_production, message=failure))
        sys.exit(1)


owner_option = click.option("--owner", "-o", "owner_id", required=True, help="Owner (user) id")
job_option = click.option("--job", "-j", default=None, help="Job description text")
job_file_option = click.option(
    "--job-file", "-f", type=click.File("r"), default=None, help="File with the job description"
)


@click.group()
def cli():
    """CV Match - semantic matching of CV components against job descriptions."""
    setup_logging()


@cli.command()
@owner_option
@job_option
@job_file_option
@click.option("--extract", "-e", is_flag=True, help="Extract job skills with the LLM first")
@click.option("--no-cache", is_flag=True, help="Recalculate even if a cached score exists")
def score(owner_id: str, job: Optional[str], job_file, extract: bool, no_cache: bool):
    """Score an owner's components against a job description."""
    text = _read_job(job, job_file)

    async def action(services: Services):
        metadata = await services.extractor.extract(text) if extract else None
        return await services.engine.score(
            owner_id, text, job_metadata=metadata, use_cache=not no_cache
        )

    result = _run(action, "Failed to calculate match score")
    _echo_json(result.model_dump(mode="json", by_alias=True))


@cli.command(name="import")
@owner_option
@click.argument("profile_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", "-r", is_flag=True, help="Delete the owner's existing components first")
@click.option("--embed", is_flag=True, help="Generate embeddings for the imported components")
def import_library(owner_id: str, profile_path: Path, replace: bool, embed: bool):
    """Import an owner's profile and components from a YAML file."""

    async def action(services: Services):
        library = load_library(owner_id, profile_path)
        await services.db.ensure_indexes()
        if replace:
            removed = await services.db.delete_owner_components(owner_id)
            logger.info(f"Removed {removed} existing components")
        await services.db.save_profile(owner_id, library.profile)
        inserted = await services.db.insert_components(library.components)
        result = None
        if embed:
            result = await services.backfill.generate_embeddings_for_user(
                owner_id, limit=max(inserted, 1)
            )
        return library, inserted, result

    library, inserted, result = _run(action, "Failed to import component library")
    counts = ", ".join(f"{t}: {n}" for t, n in sorted(library.count_by_type().items()))
    click.echo(f"Imported {inserted} components ({counts})")
    if result is not None:
        click.echo(f"Embedded: {result.successful}, Failed: {result.failed}")


@cli.command()
@owner_option
@click.option("--limit", "-l", type=int, default=None, help="Maximum components to embed")
@click.option("--batch-size", "-b", type=int, default=None, help="Components embedded concurrently")
@click.option("--strict", is_flag=True, help="Exit non-zero if any component failed")
def backfill(owner_id: str, limit: Optional[int], batch_size: Optional[int], strict: bool):
    """Generate missing embeddings for an owner's components."""

    def progress(done: int, total: int) -> None:
        click.echo(f"Embedded {done}/{total}", err=True)

    async def action(services: Services):
        result = await services.backfill.generate_embeddings_for_user(
            owner_id, limit=limit, batch_size=batch_size, on_progress=progress
        )
        if strict:
            result.raise_for_failures()
        return result

    result = _run(action, "Failed to generate embeddings")
    click.echo(f"Total: {result.total}, Successful: {result.successful}, Failed: {result.failed}")
    for failure in result.errors:
        click.echo(f"  {failure.component_id}: {failure.error}")


@cli.command()
@owner_option
def stats(owner_id: str):
    """Show embedding coverage for an owner."""

    async def action(services: Services):
        return await services.backfill.get_embedding_stats(owner_id)

    result = _run(action, "Failed to load embedding stats")
    _echo_json(result.model_dump())


@cli.command()
@owner_option
@job_option
@job_file_option
@click.option("--include-projects", "-p", is_flag=True, help="Include selected projects")
@click.option("--extract", "-e", is_flag=True, help="Extract the job title and company for the summary")
def draft(owner_id: str, job: Optional[str], job_file, include_projects: bool, extract: bool):
    """Build renderer-ready CV content tailored to a job description."""
    text = _read_job(job, job_file)

    async def action(services: Services):
        metadata = await services.extractor.extract(text) if extract else None
        generator = CVGenerator(
            services.retriever,
            services.selector,
            services.db,
            services.settings,
            summaries=services.summaries,
        )
        return await generator.generate_cv_content(
            owner_id, text, include_projects=include_projects, job_metadata=metadata
        )

    content = _run(action, "Failed to generate CV content")
    _echo_json(content.model_dump(mode="json"))


@cli.command()
@owner_option
@job_option
@job_file_option
@click.option(
    "--focus",
    "-F",
    "focus_areas",
    multiple=True,
    type=click.Choice([f.value for f in FocusArea]),
    help="Focus area (repeatable); suggested from the job text when omitted",
)
def variants(owner_id: str, job: Optional[str], job_file, focus_areas: tuple[str, ...]):
    """Generate focus-specific CV variants and recommend one."""
    text = _read_job(job, job_file)

    async def action(services: Services):
        candidates = await services.retriever.find_relevant_components(
            owner_id, text, limit=services.settings.draft_retrieval_limit
        )
        areas = [FocusArea(f) for f in focus_areas] or suggest_focus_areas(candidates, text)
        profile = await services.db.get_profile(owner_id)

        generator = CVVariantGenerator(services.selector, settings=services.settings)
        generated = await generator.generate_variants(candidates, text, profile, areas)
        return generator.recommend(generated)

    recommendation = _run(action, "Failed to generate CV variants")
    _echo_json(recommendation.model_dump(mode="json"))


if __name__ == "__main__":
    cli()
