# nftstudio/packager.py
import io
import json
import math
import os
import time
import zipfile

from PIL import Image

from .compositor import RESAMPLE_LANCZOS, decode_png, encode_png
from .errors import PackagingError
from .logging import get_logger
from .models import file_stem, strip_extension

log = get_logger(__name__)

COMPILER = "NFT Studio"
THUMB_SIZE = 120
THUMB_PADDING = 5


# =========================================================
# Naming
# =========================================================
def archive_filename(collection_name):
    return f"{file_stem(collection_name)}_collection.zip"


def contact_sheet_filename(collection_name):
    return f"{file_stem(collection_name)}_thumbnail_sheet.png"


# =========================================================
# Metadata
# =========================================================
def build_metadata(collection_name, description, edition, dna, timestamp=None):
    """
    Per-image metadata. `timestamp` is in milliseconds since the epoch;
    defaults to now.
    """
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return {
        "name": f"{collection_name} #{edition}",
        "description": description,
        "image": f"{edition}.png",
        "edition": edition,
        "date": timestamp,
        "attributes": [
            {"trait_type": layer_name, "value": strip_extension(trait_name)}
            for layer_name, trait_name in dna.items()
        ],
        "compiler": COMPILER,
    }


# =========================================================
# Archive
# =========================================================
def build_archive(collection, timestamp=None):
    """
    ZIP bytes with images/{n}.png and json/{n}.json for n = 1..N.
    The collection is left untouched if anything fails.
    """
    if not collection.images:
        raise PackagingError("Collection has no generated images")
    if timestamp is None:
        timestamp = int(time.time() * 1000)

    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for edition, image in enumerate(collection.images, start=1):
                zf.writestr(f"images/{edition}.png", image.image_data)
                metadata = build_metadata(
                    collection.name, collection.description, edition, image.traits, timestamp
                )
                zf.writestr(f"json/{edition}.json", json.dumps(metadata, indent=2))
    except (OSError, ValueError, TypeError, zipfile.BadZipFile) as e:
        raise PackagingError(f"Error building collection archive: {e}") from e

    log.info("Packed %d images into archive (%d bytes)", len(collection.images), buf.tell())
    return buf.getvalue()


# =========================================================
# Contact sheet
# =========================================================
def grid_shape(count):
    columns = math.ceil(math.sqrt(count))
    rows = math.ceil(count / columns)
    return columns, rows


def build_contact_sheet(collection, thumb_size=THUMB_SIZE, padding=THUMB_PADDING):
    """Tile every image's thumbnail into a roughly square grid on white."""
    count = len(collection.images)
    if not count:
        raise PackagingError("Collection has no generated images")

    columns, rows = grid_shape(count)
    step = thumb_size + padding
    width = columns * step - padding
    height = rows * step - padding

    try:
        sheet = Image.new("RGB", (width, height), "white")
        for index, image in enumerate(collection.images):
            thumb = decode_png(image.image_data).convert("RGBA")
            thumb = thumb.resize((thumb_size, thumb_size), RESAMPLE_LANCZOS)
            x = (index % columns) * step
            y = (index // columns) * step
            sheet.paste(thumb, (x, y), thumb)
    except (OSError, ValueError, MemoryError) as e:
        raise PackagingError(f"Error building contact sheet: {e}") from e

    return sheet


# =========================================================
# Export to disk
# =========================================================
def export_collection(collection, output_dir):
    """
    Write the archive and the contact sheet into `output_dir`.
    Returns { "archive": path, "contact_sheet": path }.
    """
    archive = build_archive(collection)
    sheet_png = encode_png(build_contact_sheet(collection))

    archive_path = os.path.join(output_dir, archive_filename(collection.name))
    sheet_path = os.path.join(output_dir, contact_sheet_filename(collection.name))
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(archive_path, "wb") as f:
            f.write(archive)
        with open(sheet_path, "wb") as f:
            f.write(sheet_png)
    except OSError as e:
        raise PackagingError(f"Error writing collection to '{output_dir}': {e}") from e

    log.info("Exported '%s' to %s", collection.name, output_dir)
    return {"archive": archive_path, "contact_sheet": sheet_path}
