# nftstudio/generator.py
import math
import random
import uuid
from dataclasses import dataclass, field

from .compositor import CANVAS_SIZE, composite, encode_png
from .errors import (
    DuplicateCombinationError,
    ExhaustedCombinationsError,
    GenerationCancelledError,
    NoValidTraitError,
    StudioError,
)
from .logging import get_logger
from .models import GeneratedImage, dna_key, snapshot_layers, validate_dependencies
from .sampler import count_combinations, eligible_traits, weighted_choice

log = get_logger(__name__)

ATTEMPTS_PER_IMAGE = 100
MIN_ATTEMPTS = 1000


@dataclass
class GenerationResult:
    images: list = field(default_factory=list)
    stats: dict = field(default_factory=lambda: {
        "success": 0, "duplicates": 0, "invalid": 0, "attempts": 0,
    })


def _safe_log(cb, msg):
    log.info(msg)
    if cb:
        try:
            cb(msg)
        except Exception:
            log.exception("log callback failed")


def progress_percent(accepted, requested):
    return math.floor(accepted / requested * 100)


def attempt_combination(layers, existing_dnas, rng=None):
    """
    One attempt: sample every layer in order, then claim the DNA key.
    Raises NoValidTraitError or DuplicateCombinationError; the caller retries.
    """
    selected = {}
    for layer_index, layer in enumerate(layers):
        options = eligible_traits(layers, layer_index, selected)
        if not options:
            raise NoValidTraitError(layer.name)
        selected[layer.name] = weighted_choice(options, rng, layer.name).name

    key = dna_key(selected)
    if key in existing_dnas:
        raise DuplicateCombinationError(key)
    existing_dnas.add(key)
    return selected


def generate_collection(
    layers,
    count,
    existing_dnas=None,
    rng=None,
    canvas_size=CANVAS_SIZE,
    max_attempts=None,
    progress_callback=None,
    log_callback=None,
    should_stop=None,
):
    """
    Generate `count` unique images.

    progress_callback(images_so_far, percent) fires once per accepted image,
    in acceptance order, with a fresh list each time.
    should_stop() is polled once per attempt.

    Raises ExhaustedCombinationsError when the layers cannot yield `count`
    unique combinations, and GenerationCancelledError when stopped. A failed
    render re-raises with the images accepted so far attached as `images`.
    """
    if count < 1:
        raise ValueError("count must be a positive integer")

    rng = rng or random.Random()
    existing_dnas = set() if existing_dnas is None else existing_dnas
    layers = validate_dependencies(snapshot_layers(layers))
    if max_attempts is None:
        max_attempts = max(count * ATTEMPTS_PER_IMAGE, MIN_ATTEMPTS)

    result = GenerationResult()
    stats = result.stats
    images = result.images

    available = count_combinations(layers, limit=count, exclude=existing_dnas)
    if available < count:
        raise ExhaustedCombinationsError(
            0, count, images, reason=f"only {available} new combinations available",
        )

    _safe_log(log_callback, f"Generating {count} images from {len(layers)} layers")

    while len(images) < count:
        if should_stop and should_stop():
            _safe_log(log_callback, f"Stopped after {len(images)} images")
            raise GenerationCancelledError(images)
        if stats["attempts"] >= max_attempts:
            raise ExhaustedCombinationsError(
                len(images), count, images,
                reason=f"gave up after {stats['attempts']} attempts",
            )
        stats["attempts"] += 1

        try:
            dna = attempt_combination(layers, existing_dnas, rng)
        except NoValidTraitError as e:
            stats["invalid"] += 1
            log.debug("Attempt %d discarded: %s", stats["attempts"], e)
            continue
        except DuplicateCombinationError as e:
            stats["duplicates"] += 1
            log.debug("Attempt %d discarded: %s", stats["attempts"], e)
            continue

        try:
            image_data = encode_png(composite(layers, dna, canvas_size))
        except StudioError as e:
            # release the claimed key so a later run can still produce it
            existing_dnas.discard(dna_key(dna))
            e.images = list(images)
            raise
        images.append(GeneratedImage(id=uuid.uuid4().hex, traits=dna, image_data=image_data))
        stats["success"] += 1
        _safe_log(log_callback, f"✅ Generated #{len(images)}")

        if progress_callback:
            progress_callback(list(images), progress_percent(len(images), count))

    _safe_log(
        log_callback,
        f"🎉 Generated {count} images "
        f"({stats['duplicates']} duplicates, {stats['invalid']} invalid attempts)",
    )
    return result
