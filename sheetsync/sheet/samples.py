"""Fixed rows used by ``init`` and the CLI's ``append`` command."""

import socket
from datetime import datetime, timezone

from .models import Row

SAMPLE_SOURCE = "Initial-Setup"
CLI_SOURCE = "sheetsync-cli"


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_sample_rows(preview_base: str, publish_base: str) -> list[Row]:
    """Two completed log entries that seed a new sheet.

    Args:
        preview_base: Site root on the preview domain (no trailing slash).
        publish_base: Site root on the publish domain (no trailing slash).
    """
    samples = [
        ("2025-12-30T10:00:00.000Z", "Sample image 1 - mountain landscape",
         "sample1", "mountain.png", "Beautiful mountain landscape at sunset"),
        ("2025-12-30T11:00:00.000Z", "Sample image 2 - ocean waves",
         "sample2", "ocean.png", "Crashing ocean waves on rocky shore"),
    ]
    rows = []
    for timestamp, prompt, page, image, text in samples:
        rows.append({
            "Timestamp": timestamp,
            "Prompt": prompt,
            "Status": "Completed",
            "DocumentPath": f"/content/{page}",
            "TargetFolder": "/images",
            "SharePointFile": image,
            "SharePointPath": f"/images/{image}",
            "ImageURL": f"https://example.com/{image}",
            "EDSURL": f"{publish_base}/{page}",
            "AEMPreviewURL": f"{preview_base}/{page}",
            "Source": SAMPLE_SOURCE,
            "UserHost": "localhost",
            "GeneratedText": text,
        })
    return rows


def build_log_row(
    prompt: str,
    preview_base: str,
    publish_base: str,
    status: str = "Testing",
    page: str = "test",
    source: str = CLI_SOURCE,
    generated_text: str = "",
) -> Row:
    """Build one generation-log row stamped with the current UTC time."""
    return {
        "Timestamp": _iso_now(),
        "Prompt": prompt,
        "Status": status,
        "DocumentPath": f"/{page}",
        "TargetFolder": f"/{page}",
        "SharePointFile": f"{page}.png",
        "SharePointPath": "",
        "ImageURL": f"https://example.com/{page}.png",
        "EDSURL": f"{publish_base}/{page}",
        "AEMPreviewURL": f"{preview_base}/{page}",
        "Source": source,
        "UserHost": socket.gethostname(),
        "GeneratedText": generated_text,
    }
