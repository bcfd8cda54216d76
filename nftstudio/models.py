# nftstudio/models.py
import copy
import random
import re
import uuid
from dataclasses import dataclass, field, replace

from .errors import InvalidDependencyError


@dataclass(frozen=True)
class Dependency:
    layer_index: int
    trait_index: int


@dataclass
class Trait:
    name: str
    image: object          # PNG/JPEG bytes, a file path, or a PIL image
    rarity: float = 0.0
    dependencies: list = field(default_factory=list)

    @property
    def display_name(self):
        return strip_extension(self.name)


@dataclass
class Layer:
    name: str
    traits: list = field(default_factory=list)
    order: int = 0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def find_trait(self, trait_name):
        return next((t for t in self.traits if t.name == trait_name), None)


@dataclass(frozen=True)
class GeneratedImage:
    id: str
    traits: dict           # DNA: layer name -> trait name, in layer order
    image_data: bytes      # PNG


@dataclass
class Collection:
    name: str = "Collection"
    description: str = ""
    images: list = field(default_factory=list)

    def add(self, image):
        self.images.append(image)

    def extend(self, images):
        self.images.extend(images)

    @property
    def file_stem(self):
        return file_stem(self.name)

    def __len__(self):
        return len(self.images)


def strip_extension(name):
    return name.split(".")[0]


def file_stem(name):
    return re.sub(r"\s+", "_", name)


# =========================================================
# Layer construction & editing
# =========================================================
def make_layer(name, traits, order=0):
    """
    Build a Layer from `traits`, which may be Trait objects or (name, image) pairs.
    Traits without a rarity get an equal share of 100.
    """
    built = []
    for t in traits:
        if not isinstance(t, Trait):
            t_name, t_image = t
            t = Trait(name=t_name, image=t_image)
        built.append(t)
    if built and all(t.rarity <= 0 for t in built):
        share = 100 / len(built)
        for t in built:
            t.rarity = share
    return Layer(name=name, traits=built, order=order)


def renumber_layers(layers):
    for index, layer in enumerate(layers):
        layer.order = index
    return layers


def reorder_layers(layers, source_index, destination_index):
    """Move one layer and renumber every `order`. Returns a new list."""
    items = list(layers)
    moved = items.pop(source_index)
    items.insert(destination_index, moved)
    return renumber_layers(items)


def normalize_rarities(layer):
    total = sum(t.rarity for t in layer.traits)
    if total <= 0:
        return layer
    for t in layer.traits:
        t.rarity = t.rarity / total * 100
    return layer


def set_trait_rarity(layer, trait_index, value):
    if value < 0:
        raise ValueError("Rarity must be non-negative")
    layer.traits[trait_index].rarity = float(value)
    return normalize_rarities(layer)


def randomize_rarities(layer, rng=None):
    rng = rng or random
    for t in layer.traits:
        t.rarity = rng.random()
    return normalize_rarities(layer)


def set_bulk_rarity(layer, value):
    """Give every trait in the layer the same weight. Not renormalised."""
    if value < 0:
        raise ValueError("Rarity must be non-negative")
    for t in layer.traits:
        t.rarity = float(value)
    return layer


# =========================================================
# Dependency editing
# =========================================================
def add_dependency(trait, layer_index, trait_index):
    dep = Dependency(layer_index, trait_index)
    trait.dependencies.append(dep)
    return dep


def update_dependency(trait, index, layer_index=None, trait_index=None):
    changes = {}
    if layer_index is not None:
        changes["layer_index"] = layer_index
    if trait_index is not None:
        changes["trait_index"] = trait_index
    trait.dependencies[index] = replace(trait.dependencies[index], **changes)
    return trait.dependencies[index]


def remove_dependency(trait, index):
    return trait.dependencies.pop(index)


def snapshot_layers(layers):
    """
    Independent copy of the layer sequence for one run.
    Image payloads are shared; they are treated as read-only.
    """
    memo = {}
    for layer in layers:
        for t in layer.traits:
            memo[id(t.image)] = t.image
    return copy.deepcopy(list(layers), memo)


def validate_dependencies(layers):
    """
    Dependencies may only point at an existing trait in a strictly earlier layer:
    layers are sampled in order, so anything else can never be satisfied.
    """
    for layer_index, layer in enumerate(layers):
        for trait in layer.traits:
            for dep in trait.dependencies:
                where = f"'{layer.name}:{trait.name}'"
                if not 0 <= dep.layer_index < len(layers):
                    raise InvalidDependencyError(
                        f"{where} depends on missing layer index {dep.layer_index}"
                    )
                if dep.layer_index >= layer_index:
                    raise InvalidDependencyError(
                        f"{where} depends on layer '{layers[dep.layer_index].name}', "
                        f"which is not earlier in the layer order"
                    )
                target = layers[dep.layer_index]
                if not 0 <= dep.trait_index < len(target.traits):
                    raise InvalidDependencyError(
                        f"{where} depends on missing trait index {dep.trait_index} "
                        f"in layer '{target.name}'"
                    )
    return layers


DNA_SEPARATOR = "-"


def dna_key(dna):
    """Uniqueness key: chosen trait names joined in layer order."""
    return DNA_SEPARATOR.join(dna.values())
