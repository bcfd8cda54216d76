"""Layered trait compositing and collection export for generative NFT art."""

from .analytics import rarity_report, trait_distribution
from .compositor import composite, encode_png
from .config import StudioConfig, build_layers, collect_traits
from .errors import (
    CanvasUnavailableError,
    ConfigError,
    DuplicateCombinationError,
    ExhaustedCombinationsError,
    GenerationCancelledError,
    InvalidDependencyError,
    NoValidTraitError,
    PackagingError,
    StudioError,
    TraitImageError,
)
from .generator import GenerationResult, attempt_combination, generate_collection
from .models import (
    Collection,
    Dependency,
    GeneratedImage,
    Layer,
    Trait,
    add_dependency,
    dna_key,
    make_layer,
    remove_dependency,
    reorder_layers,
    set_bulk_rarity,
    set_trait_rarity,
    update_dependency,
)
from .packager import build_archive, build_contact_sheet, build_metadata, export_collection
from .sampler import eligible_traits, is_trait_valid, weighted_choice

__version__ = "0.1.0"
