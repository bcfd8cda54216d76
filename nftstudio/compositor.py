# nftstudio/compositor.py
import io
import os

from PIL import Image, UnidentifiedImageError

from .errors import CanvasUnavailableError, TraitImageError
from .logging import get_logger

log = get_logger(__name__)

CANVAS_SIZE = (500, 500)


# =========================================================
# Pillow resample helper
# =========================================================
def _resample_lanczos():
    try:
        return Image.Resampling.LANCZOS
    except AttributeError:
        return Image.LANCZOS


RESAMPLE_LANCZOS = _resample_lanczos()


def new_canvas(size=CANVAS_SIZE, color=(0, 0, 0, 0), mode="RGBA"):
    try:
        return Image.new(mode, tuple(size), color)
    except (ValueError, MemoryError, TypeError) as e:
        raise CanvasUnavailableError(f"Could not create {mode} canvas of size {size}: {e}") from e


def load_trait_image(trait, layer_name="?"):
    """Decode a trait's image (bytes, path or PIL image) into RGBA."""
    source = trait.image
    try:
        if isinstance(source, Image.Image):
            img = source
        elif isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        elif isinstance(source, (str, os.PathLike)):
            img = Image.open(source)
        else:
            raise TypeError(f"unsupported image source {type(source).__name__}")
        return img.convert("RGBA")
    except (OSError, UnidentifiedImageError, TypeError, ValueError) as e:
        raise TraitImageError(layer_name, trait.name, e) from e


def composite(layers, dna, size=CANVAS_SIZE):
    """
    Paint the trait chosen for each layer, in layer order, stretched over the
    whole canvas. Traits missing from their layer are skipped.
    """
    canvas = new_canvas(size)
    canvas_size = canvas.size

    for layer in layers:
        trait_name = dna.get(layer.name)
        trait = layer.find_trait(trait_name) if trait_name is not None else None
        if trait is None:
            log.warning("Trait '%s:%s' not found; skipping layer", layer.name, trait_name)
            continue
        layer_img = load_trait_image(trait, layer.name)
        if layer_img.size != canvas_size:
            layer_img = layer_img.resize(canvas_size, RESAMPLE_LANCZOS)
        canvas = Image.alpha_composite(canvas, layer_img)

    return canvas


def encode_png(image):
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def decode_png(data):
    return Image.open(io.BytesIO(data))
