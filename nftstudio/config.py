# nftstudio/config.py
import json
import os
from dataclasses import asdict, dataclass, field

from .errors import ConfigError
from .logging import get_logger
from .models import Dependency, Trait, make_layer, normalize_rarities, validate_dependencies

log = get_logger(__name__)

MIN_QUANTITY = 1
MAX_QUANTITY = 10000
DEFAULT_RARITY = 100


# =========================================================
# Helpers for JSON persistence
# =========================================================
def load_json(path, default):
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default


def save_json(path, data):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=4)


# =========================================================
# Project config
# =========================================================
@dataclass
class StudioConfig:
    """
    One saved project.

      rarities:      { "Layer:Trait": weight }
      include_pairs: [ ["LayerA:TraitA", "LayerB:TraitB"], ... ]  (A requires B)
    """
    layers_dir: str = ""
    output_dir: str = "output"
    layer_order: list = field(default_factory=list)
    excluded_layers: list = field(default_factory=list)
    collection_name: str = "Collection"
    description: str = ""
    width: int = 500
    height: int = 500
    quantity: int = 10
    rarities: dict = field(default_factory=dict)
    include_pairs: list = field(default_factory=list)

    @property
    def size(self):
        return (self.width, self.height)

    @classmethod
    def from_dict(cls, data):
        collection = data.get("collection", {}) or {}
        size = data.get("size", {}) or {}
        quantity = int(data.get("quantity", 10))
        rarities = {}
        for k, v in (data.get("rarities", {}) or {}).items():
            try:
                rarities[k] = float(v)
            except (TypeError, ValueError):
                log.warning("Ignoring non-numeric rarity for '%s': %r", k, v)
        return cls(
            layers_dir=data.get("layers_dir", ""),
            output_dir=data.get("output_dir", "output"),
            layer_order=list(data.get("layer_order", []) or []),
            excluded_layers=list(data.get("excluded_layers", []) or []),
            collection_name=collection.get("name") or "Collection",
            description=collection.get("description") or "",
            width=int(size.get("width", 500)),
            height=int(size.get("height", 500)),
            quantity=min(max(quantity, MIN_QUANTITY), MAX_QUANTITY),
            rarities=rarities,
            include_pairs=[
                [p[0], p[1]] for p in (data.get("include_pairs", []) or [])
                if isinstance(p, (list, tuple)) and len(p) == 2
            ],
        )

    def to_dict(self):
        data = asdict(self)
        return {
            "layers_dir": data["layers_dir"],
            "output_dir": data["output_dir"],
            "layer_order": data["layer_order"],
            "excluded_layers": data["excluded_layers"],
            "collection": {"name": data["collection_name"], "description": data["description"]},
            "size": {"width": data["width"], "height": data["height"]},
            "quantity": data["quantity"],
            "rarities": data["rarities"],
            "include_pairs": data["include_pairs"],
        }

    @classmethod
    def load(cls, path):
        data = load_json(path, None)
        if data is None:
            raise ConfigError(f"Could not read config '{path}'")
        return cls.from_dict(data)

    def save(self, path):
        save_json(path, self.to_dict())


# =========================================================
# Layers from disk
# =========================================================
def collect_traits(layers_dir):
    """
    Return dict: { layer_name: [file_name, ...] }
    One entry per sub-directory holding at least one .png file.
    """
    out = {}
    if not os.path.isdir(layers_dir):
        return out
    for layer in sorted(os.listdir(layers_dir)):
        lp = os.path.join(layers_dir, layer)
        if not os.path.isdir(lp):
            continue
        traits = [f for f in sorted(os.listdir(lp)) if f.lower().endswith(".png")]
        if traits:
            out[layer] = traits
    return out


def _split_key(key):
    try:
        layer, trait = key.split(":", 1)
    except ValueError:
        return None
    return layer, trait


def _trait_index(traits, name):
    """Match by file name, then by stem (case-insensitive)."""
    for i, f in enumerate(traits):
        if f == name:
            return i
    for i, f in enumerate(traits):
        if os.path.splitext(f)[0].lower() == name.lower():
            return i
    return None


def build_layers(config):
    """Build the ordered layer list a StudioConfig describes."""
    layers_dir = config.layers_dir
    if not layers_dir or not os.path.isdir(layers_dir):
        raise ConfigError(f"Invalid layers dir '{layers_dir}'")

    all_traits = collect_traits(layers_dir)
    layer_order = config.layer_order or sorted(all_traits.keys())
    excluded = set(config.excluded_layers)
    for name in layer_order:
        if name not in all_traits:
            log.warning("Layer '%s' has no images in %s; skipping", name, layers_dir)
    final_order = [L for L in layer_order if L in all_traits and L not in excluded]

    layers = []
    for order, layer_name in enumerate(final_order):
        traits = []
        for f in all_traits[layer_name]:
            stem = os.path.splitext(f)[0]
            # Unlisted traits weigh 100; looked up by file name first, then stem
            rarity = config.rarities.get(
                f"{layer_name}:{f}", config.rarities.get(f"{layer_name}:{stem}", DEFAULT_RARITY)
            )
            traits.append(Trait(
                name=f,
                image=os.path.join(layers_dir, layer_name, f),
                rarity=max(float(rarity), 0.0),
            ))
        layer = make_layer(layer_name, traits, order)
        layers.append(normalize_rarities(layer))

    index = {layer.name: i for i, layer in enumerate(layers)}
    for a, b in config.include_pairs:
        pa, pb = _split_key(a), _split_key(b)
        if pa is None or pb is None:
            log.warning("Ignoring malformed include pair %r -> %r", a, b)
            continue
        la, lb = index.get(pa[0]), index.get(pb[0])
        if la is None or lb is None:
            log.warning("Include pair %r -> %r references an unknown layer", a, b)
            continue
        ta = _trait_index(all_traits[pa[0]], pa[1])
        tb = _trait_index(all_traits[pb[0]], pb[1])
        if ta is None or tb is None:
            log.warning("Include pair %r -> %r references an unknown trait", a, b)
            continue
        layers[la].traits[ta].dependencies.append(Dependency(lb, tb))

    return validate_dependencies(layers)
