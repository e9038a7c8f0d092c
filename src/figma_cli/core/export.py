"""Asset export: scale and crop options, target selection, batched rendering."""

import io
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from PIL import Image

from figma_cli.api import get_images
from figma_cli.config import EXPORT_BATCH_SIZE
from figma_cli.core.tree.navigation import iter_nodes
from figma_cli.errors import InputError
from figma_cli.models.node import BoundingBox, Node
from figma_cli.protocols import ApiProtocol

EXPORT_FORMATS = ("png", "jpg", "svg", "pdf")
DEFAULT_SCALE = 2
RETINA_SCALE = 3
MIN_SCALE, MAX_SCALE = 1, 4


@dataclass(frozen=True)
class ExportTarget:
    id: str
    name: str
    kind: str


@dataclass
class ExportResult:
    output_dir: Path
    total: int = 0
    written: list[Path] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_dir": str(self.output_dir),
            "total": self.total,
            "exported": len(self.written),
            "files": [str(p) for p in self.written],
            "download_failed": list(self.failed),
            "no_image_url": list(self.missing),
        }


def resolve_export_scale(scale: float | None = None, retina: bool = False) -> float:
    """Explicit scale wins; otherwise 3 with ``retina``, else 2."""
    if scale is None:
        scale = RETINA_SCALE if retina else DEFAULT_SCALE
    if not math.isfinite(scale) or not MIN_SCALE <= scale <= MAX_SCALE:
        msg = "Scale must be between 1 and 4."
        raise InputError(msg)
    return scale


def parse_crop_rect(value: str) -> BoundingBox:
    """Parse ``x,y,width,height`` into a rectangle."""
    parts = value.split(",")
    try:
        numbers = [float(part.strip()) for part in parts]
    except ValueError:
        numbers = []
    if len(parts) != 4 or len(numbers) != 4 or not all(math.isfinite(n) for n in numbers):
        msg = "Invalid --crop value. Expected format: x,y,width,height"
        raise InputError(msg)

    x, y, width, height = numbers
    if width <= 0 or height <= 0:
        msg = "Crop width and height must be greater than 0."
        raise InputError(msg)
    return BoundingBox(x=x, y=y, width=width, height=height)


def apply_png_crop(data: bytes, crop: BoundingBox) -> bytes:
    """Crop PNG bytes, clamping the rectangle to the image bounds."""
    with Image.open(io.BytesIO(data)) as image:
        x = max(0, math.floor(crop.x))
        y = max(0, math.floor(crop.y))
        width = min(max(1, math.floor(crop.width)), max(0, image.width - x))
        height = min(max(1, math.floor(crop.height)), max(0, image.height - y))
        if width <= 0 or height <= 0:
            msg = "Crop rectangle falls outside exported image bounds."
            raise InputError(msg)

        out = io.BytesIO()
        image.crop((x, y, x + width, y + height)).save(out, format="PNG")
    return out.getvalue()


def select_targets(
    document: Node,
    *,
    node_ids: list[str] | None = None,
    components: bool = False,
    frames: bool = False,
) -> list[ExportTarget]:
    """Pick the nodes to export.

    Explicit ids win. Otherwise components and component sets and/or frames
    not starting with ``_`` anywhere in the document; with neither flag, the
    top-level frames and components of every page.
    """
    if node_ids:
        return [ExportTarget(id=i, name=i, kind="node") for i in node_ids]

    targets = []
    if components or frames:
        for node in iter_nodes(document):
            if components and node.type == "COMPONENT":
                targets.append(ExportTarget(node.id, node.name, "component"))
            elif components and node.type == "COMPONENT_SET":
                targets.append(ExportTarget(node.id, node.name, "component-set"))
            elif frames and node.type == "FRAME" and not node.name.startswith("_"):
                targets.append(ExportTarget(node.id, node.name, "frame"))
        return targets

    for page in document.children:
        for child in page.children:
            if child.type in ("FRAME", "COMPONENT"):
                targets.append(ExportTarget(child.id, child.name, child.type.lower()))
    return targets


def sanitize_filename(name: str) -> str:
    name = re.sub(r'[<>:"/\\|?*]', "-", name)
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"-+", "-", name)
    return name.strip("-").lower()


def export_assets(
    api: ApiProtocol,
    file_key: str,
    targets: list[ExportTarget],
    output_dir: Path,
    *,
    fmt: str = "png",
    scale: float = DEFAULT_SCALE,
    crop: BoundingBox | None = None,
    batch_size: int = EXPORT_BATCH_SIZE,
) -> ExportResult:
    """Render ``targets`` in batches and write each image to ``output_dir``.

    A failed render request raises. A failed download is logged and skipped.
    """
    if fmt not in EXPORT_FORMATS:
        msg = f"Unknown export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}."
        raise InputError(msg)
    if crop is not None and fmt != "png":
        msg = "--crop is currently supported only when --format png."
        raise InputError(msg)

    result = ExportResult(output_dir=output_dir, total=len(targets))
    output_dir.mkdir(parents=True, exist_ok=True)

    for start in range(0, len(targets), batch_size):
        batch = targets[start : start + batch_size]
        logger.info(f"Exporting batch {start // batch_size + 1}...")
        images = get_images(api, file_key, [t.id for t in batch], fmt=fmt, scale=scale).get("images") or {}

        for target in batch:
            url = images.get(target.id)
            if not url:
                logger.warning(f"{target.name}: no image URL")
                result.missing.append(target.name)
                continue

            data = api.download(url)
            if data is None:
                logger.error(f"{target.name}: download failed")
                result.failed.append(target.name)
                continue

            if crop is not None:
                data = apply_png_crop(data, crop)
            path = output_dir / f"{sanitize_filename(target.name)}.{fmt}"
            path.write_bytes(data)
            logger.info(f"  ✓ {path.name}")
            result.written.append(path)

    return result
