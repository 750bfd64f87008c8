"""CLI command implementations for the logo gallery upload pipeline."""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from typing import Any

import click

from logo_gallery.errors import ACCEPTED_STATUS, LogoGalleryError
from logo_gallery.models.config import Config
from logo_gallery.services.database import Database
from logo_gallery.utils.logger import configure_logging


def _get_config() -> Config:
    """Load configuration from environment and .env file."""
    return Config()


def _get_db(config: Config) -> Database:
    """Initialize database with schema."""
    db = Database(db_path=config.database_path)
    db.init_db()
    return db


def _read_file(path: str) -> bytes:
    return Path(path).read_bytes()


def _guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "application/octet-stream"


def _declared_dimensions(data: bytes) -> tuple[int | None, int | None]:
    """Probe width/height when the caller did not declare them."""
    from logo_gallery.utils.image_utils import image_from_bytes

    try:
        return image_from_bytes(data).size
    except (OSError, ValueError, SyntaxError):
        return None, None


def _print_error(error: LogoGalleryError, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(error.to_dict(), indent=2, default=str))
        return
    reason = getattr(error, "reason", None)
    suffix = f" (reason: {reason.value})" if reason is not None else ""
    click.echo(f"[ERROR] {error.message}{suffix} [status {error.status_code}]")
    similarity_info: dict[str, Any] | None = error.details.get("similarity_info")
    if similarity_info:
        click.echo(
            f"  Best match: similarity {similarity_info['similarity']:.3f} "
            f"({similarity_info['match_type']})"
        )
        for match in similarity_info.get("similar_logos", []):
            click.echo(f"    logo {match['logo_id']}: {match['similarity']:.3f}")


@click.command()
def init_db() -> None:
    """Create the database schema."""
    config = _get_config()
    configure_logging(config.log_level, json_output=config.log_json)
    db = _get_db(config)
    click.echo(f"[SUCCESS] Database initialized at {config.database_path}")
    db.close()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--owner", "owner_id", required=True, type=str, help="Uploading owner ID")
@click.option("--title", default=None, type=str, help="Logo title (defaults to file name)")
@click.option("--description", default=None, type=str, help="Logo description")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--content-type", default=None, type=str, help="Override detected MIME type")
@click.option("--width", default=None, type=int, help="Declared width in pixels")
@click.option("--height", default=None, type=int, help="Declared height in pixels")
@click.option(
    "--allow-system-duplicates/--reject-system-duplicates",
    default=None,
    help="Tolerate identical content already uploaded by other owners",
)
@click.option(
    "--allow-similar/--reject-similar",
    default=None,
    help="Tolerate near-duplicates of the owner's existing logos",
)
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def upload(
    path: str,
    owner_id: str,
    title: str | None,
    description: str | None,
    tags: tuple[str, ...],
    content_type: str | None,
    width: int | None,
    height: int | None,
    allow_system_duplicates: bool | None,
    allow_similar: bool | None,
    output_format: str,
) -> None:
    """Upload a logo image, rejecting duplicates and near-duplicates."""
    config = _get_config()
    configure_logging(config.log_level, json_output=config.log_json)
    db = _get_db(config)

    from logo_gallery.models.upload import LogoUpload, UploadPolicy
    from logo_gallery.repositories.logo_repository import LogoRepository
    from logo_gallery.services.logo_upload_service import LogoUploadService

    data = _read_file(path)
    if width is None or height is None:
        probed_width, probed_height = _declared_dimensions(data)
        width = width if width is not None else probed_width
        height = height if height is not None else probed_height

    default_policy = config.upload_policy()
    policy = UploadPolicy(
        allow_system_duplicates=(
            default_policy.allow_system_duplicates
            if allow_system_duplicates is None
            else allow_system_duplicates
        ),
        allow_similar_images=(
            default_policy.allow_similar_images if allow_similar is None else allow_similar
        ),
    )

    service = LogoUploadService(LogoRepository(db), config)
    try:
        logo = service.upload(
            LogoUpload(
                file_bytes=data,
                file_name=Path(path).name,
                content_type=content_type or _guess_content_type(path),
                title=title if title is not None else Path(path).stem,
                description=description,
                tags=list(tags),
                width=width,
                height=height,
            ),
            owner_id,
            policy,
        )
    except LogoGalleryError as exc:
        _print_error(exc, output_format)
        db.close()
        raise click.exceptions.Exit(1) from exc

    if output_format == "json":
        body = logo.model_dump(mode="json")
        body["status_code"] = ACCEPTED_STATUS
        click.echo(json.dumps(body, indent=2))
    else:
        click.echo(f"[SUCCESS] Logo {logo.id} uploaded [status {ACCEPTED_STATUS}]")
        click.echo(f"  Title: {logo.title}")
        click.echo(f"  Size: {logo.width}x{logo.height}, {logo.file_size} bytes")
        click.echo(f"  Content hash: {logo.content_hash}")
        colors = ", ".join(color.hex for color in logo.image_features.dominant_colors)
        click.echo(f"  Dominant colors: {colors}")
    db.close()


@click.command()
@click.argument("first", type=click.Path(exists=True, dir_okay=False))
@click.argument("second", type=click.Path(exists=True, dir_okay=False))
def compare(first: str, second: str) -> None:
    """Compare two image files and print their similarity."""
    config = _get_config()
    configure_logging(config.log_level, json_output=config.log_json)

    from logo_gallery.services.logo_upload_service import LogoUploadService

    try:
        result = LogoUploadService.compare_images(_read_file(first), _read_file(second))
    except LogoGalleryError as exc:
        _print_error(exc, "summary")
        raise click.exceptions.Exit(1) from exc

    click.echo(f"Similarity: {result.similarity:.4f}")
    click.echo(f"Match type: {result.match_type.value}")


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--owner", "owner_id", default=None, type=str, help="Only this owner's logos")
@click.option("--min-similarity", default=0.55, type=float, help="Min similarity 0.0-1.0")
@click.option("--limit", default=10, type=int, help="Max results")
def find_similar(path: str, owner_id: str | None, min_similarity: float, limit: int) -> None:
    """List stored logos that look like the given image."""
    config = _get_config()
    configure_logging(config.log_level, json_output=config.log_json)
    db = _get_db(config)

    from logo_gallery.repositories.logo_repository import LogoRepository
    from logo_gallery.services.logo_upload_service import LogoUploadService

    logo_repo = LogoRepository(db)
    service = LogoUploadService(logo_repo, config)
    try:
        matches = service.find_similar(
            _read_file(path),
            owner_id=owner_id,
            min_similarity=min_similarity,
            limit=limit,
        )
    except LogoGalleryError as exc:
        _print_error(exc, "summary")
        db.close()
        raise click.exceptions.Exit(1) from exc

    if not matches:
        click.echo("[INFO] No similar logos found.")
    else:
        click.echo(f"[INFO] Found {len(matches)} similar logos:\n")
        for match in matches:
            logo = logo_repo.get_logo(match.logo_id) or {}
            click.echo(
                f"  {match.logo_id} | {logo.get('title', 'Unknown')} | "
                f"owner: {logo.get('owner_id', 'N/A')} | "
                f"similarity: {match.similarity:.3f} ({match.match_type.value})"
            )
    db.close()


@click.command()
@click.option("--owner", "owner_id", default=None, type=str, help="Only this owner's logos")
def list_logos(owner_id: str | None) -> None:
    """List stored logos."""
    config = _get_config()
    configure_logging(config.log_level, json_output=config.log_json)
    db = _get_db(config)

    from logo_gallery.models.logo import Logo
    from logo_gallery.repositories.logo_repository import LogoRepository

    logo_repo = LogoRepository(db)
    records = logo_repo.get_logos_by_owner(owner_id) if owner_id else logo_repo.get_all_logos()
    logos = [Logo.from_row(record) for record in records]

    if not logos:
        click.echo("[INFO] No logos stored.")
    else:
        click.echo(f"[INFO] {len(logos)} logos:\n")
        for logo in logos:
            click.echo(
                f"  {logo.id} | {logo.title} | owner: {logo.owner_id} | "
                f"{logo.width}x{logo.height} | {logo.created_at.date().isoformat()}"
            )
    db.close()
