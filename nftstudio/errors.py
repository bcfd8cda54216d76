# nftstudio/errors.py


class StudioError(Exception):
    """Base class for everything the studio raises on purpose."""


# =========================================================
# Per-attempt signals (handled inside the generator)
# =========================================================
class NoValidTraitError(StudioError):
    def __init__(self, layer_name):
        super().__init__(f"No valid traits for layer '{layer_name}'")
        self.layer_name = layer_name


class DuplicateCombinationError(StudioError):
    def __init__(self, dna):
        super().__init__(f"Duplicate combination '{dna}'")
        self.dna = dna


# =========================================================
# Fatal to a generation run
# =========================================================
class CanvasUnavailableError(StudioError):
    pass


class TraitImageError(StudioError):
    def __init__(self, layer_name, trait_name, reason):
        super().__init__(f"Could not load image for '{layer_name}:{trait_name}': {reason}")
        self.layer_name = layer_name
        self.trait_name = trait_name


class ExhaustedCombinationsError(StudioError):
    """
    Raised when the requested count cannot be reached.
    `images` holds whatever was produced before giving up.
    """

    def __init__(self, produced, requested, images=None, reason=None):
        msg = f"Only {produced} of {requested} unique combinations could be generated"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.produced = produced
        self.requested = requested
        self.images = list(images or [])


class GenerationCancelledError(StudioError):
    def __init__(self, images=None):
        self.images = list(images or [])
        super().__init__(f"Generation cancelled after {len(self.images)} images")


# =========================================================
# Configuration / export
# =========================================================
class InvalidDependencyError(StudioError):
    pass


class ConfigError(StudioError):
    pass


class PackagingError(StudioError):
    pass
