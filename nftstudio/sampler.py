# nftstudio/sampler.py
import bisect
import itertools
import random

from .errors import NoValidTraitError
from .models import dna_key


# =========================================================
# Validity evaluation
# =========================================================
def is_trait_valid(layers, layer_index, trait_index, selected):
    """
    selected: { layer_name: trait_name } for the layers processed so far.
    A trait is eligible when every dependency names the trait already chosen
    for its layer. An unassigned layer never satisfies a dependency.
    """
    trait = layers[layer_index].traits[trait_index]
    if not trait.dependencies:
        return True
    for dep in trait.dependencies:
        dep_layer = layers[dep.layer_index]
        dep_trait = dep_layer.traits[dep.trait_index]
        if selected.get(dep_layer.name) != dep_trait.name:
            return False
    return True


def eligible_traits(layers, layer_index, selected):
    layer = layers[layer_index]
    return [
        t for i, t in enumerate(layer.traits)
        if is_trait_valid(layers, layer_index, i, selected)
    ]


# =========================================================
# Weighted choice
# =========================================================
def weighted_choice(traits, rng=None, layer_name=None):
    """
    Pick one trait with probability rarity / sum(rarities of `traits`).
    Negative rarities count as 0. If every weight is 0, falls back to uniform.
    """
    if not traits:
        raise NoValidTraitError(layer_name or "?")
    rng = rng or random

    weights = [max(float(t.rarity), 0.0) for t in traits]
    cumulative = list(itertools.accumulate(weights))
    total = cumulative[-1]
    if total <= 0:
        return rng.choice(traits)

    r = rng.random() * total
    # bisect_right skips zero-weight buckets (their cumulative equals the previous one)
    index = bisect.bisect_right(cumulative, r)
    return traits[min(index, len(traits) - 1)]


def _completion_check(layers):
    """
    Return can_complete(layer_index, selected): whether layers[layer_index:]
    can still each get an eligible trait. Results are memoised on the earlier
    choices those layers actually depend on.
    """
    n_layers = len(layers)
    relevant = [()] * (n_layers + 1)
    refs = set()
    for i in range(n_layers - 1, -1, -1):
        for trait in layers[i].traits:
            refs.update(dep.layer_index for dep in trait.dependencies)
        relevant[i] = tuple(sorted(j for j in refs if j < i))
    memo = {}

    def can_complete(layer_index, selected):
        if layer_index == n_layers:
            return True
        key = (layer_index,) + tuple(selected.get(layers[j].name) for j in relevant[layer_index])
        if key in memo:
            return memo[key]
        layer = layers[layer_index]
        ok = False
        for trait in eligible_traits(layers, layer_index, selected):
            selected[layer.name] = trait.name
            ok = can_complete(layer_index + 1, selected)
            del selected[layer.name]
            if ok:
                break
        memo[key] = ok
        return ok

    return can_complete


def count_combinations(layers, limit=None, exclude=None):
    """
    Number of distinct DNA keys reachable while honouring dependencies,
    ignoring keys in `exclude`. Stops early once `limit` is reached.
    Dead-end prefixes are pruned, so the walk only descends into subtrees
    that hold at least one complete combination.
    """
    seen = set()
    exclude = exclude or set()
    count = 0
    n_layers = len(layers)
    can_complete = _completion_check(layers)

    def walk(layer_index, selected):
        nonlocal count
        if layer_index == n_layers:
            key = dna_key(selected)
            if key not in exclude and key not in seen:
                seen.add(key)
                count += 1
            return
        layer = layers[layer_index]
        for trait in eligible_traits(layers, layer_index, selected):
            selected[layer.name] = trait.name
            if can_complete(layer_index + 1, selected):
                walk(layer_index + 1, selected)
            del selected[layer.name]
            if limit is not None and count >= limit:
                return

    if n_layers == 0:
        return 0
    walk(0, {})
    return count
