from __future__ import annotations

import logging
import tempfile
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Protocol

from app.config import Settings
from app.errors import FetchError
from app.schemas import FabricScene, SceneObject
from app.services.document import PdfDocumentBuilder, page_size_pt
from app.services.objects import DrawCommand, Fetcher, parse_or_skip, prepare_object

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class ArtifactStore(Protocol):
    def store(self, data: bytes, content_kind: str) -> str: ...


def _parse_objects(raw_objects: list[Any]) -> list[tuple[int, SceneObject]]:
    parsed: list[tuple[int, SceneObject]] = []
    for index, raw in enumerate(raw_objects or []):
        obj = parse_or_skip(raw, index=index)
        if obj is not None:
            parsed.append((index, obj))
    return parsed


def render_scene(
    scene: FabricScene,
    builder: Any,
    fetcher: Fetcher,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> bytes:
    """Draw ``scene`` onto ``builder`` and return the finalized document bytes.

    Objects are resolved concurrently (images wait on their fetch) but their
    draw commands are committed strictly in input order, so later objects
    always land on top of earlier ones. Any fetch failure aborts the render
    before a single object is drawn.
    """
    objects = _parse_objects(scene.objects)

    results: list[tuple[int, DrawCommand]] = []
    failures: list[tuple[int, FetchError]] = []
    if objects:
        workers = max(1, min(int(max_workers), len(objects)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scene-object") as pool:
            futures: list[tuple[int, Future]] = [
                (index, pool.submit(prepare_object, obj, fetcher)) for index, obj in objects
            ]
            for index, future in futures:
                try:
                    results.append((index, future.result()))
                except FetchError as e:
                    failures.append((index, e))

    if failures:
        raise FetchError.aggregate(failures)

    if scene.background:
        builder.fill_page(scene.background)

    for _index, command in results:
        command.apply(builder)

    data = builder.finalize()
    logger.info(
        "SCENE_RENDERED",
        extra={"objects_in": len(scene.objects or []), "objects_drawn": len(results), "bytes": len(data)},
    )
    return data


def convert_scene(
    *,
    settings: Settings,
    scene: FabricScene,
    fetcher: Fetcher,
    store: ArtifactStore,
    work_dir: str | Path | None = None,
) -> str:
    # The PDF sink lives in a scoped temp dir, removed on success and on every failure.
    with tempfile.TemporaryDirectory(prefix="fabric_pdf_", dir=str(work_dir) if work_dir else None) as td:
        builder = PdfDocumentBuilder(Path(td) / "output.pdf", page_size=page_size_pt(settings.PAGE_SIZE))
        data = render_scene(scene, builder, fetcher, max_workers=settings.IMAGE_FETCH_WORKERS)
        url = store.store(data, "pdf")

    logger.info("SCENE_CONVERTED", extra={"objects": len(scene.objects or []), "bytes": len(data), "url": url})
    return url
