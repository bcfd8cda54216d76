# nftstudio/analytics.py
from .models import strip_extension


def trait_distribution(layers, images):
    """
    Count how often each trait appears across `images`.
    Returns { layer_name: { trait_display_name: count } }, every known trait seeded at 0.
    """
    distribution = {}
    for layer in layers:
        distribution[layer.name] = {t.display_name: 0 for t in layer.traits}

    for image in images:
        for layer_name, trait_name in image.traits.items():
            counts = distribution.setdefault(layer_name, {})
            key = strip_extension(trait_name)
            counts[key] = counts.get(key, 0) + 1

    return distribution


def rarity_report(layers, images):
    """Observed share (0-100) of each trait next to its configured rarity."""
    distribution = trait_distribution(layers, images)
    total = len(images)
    report = {}
    for layer in layers:
        counts = distribution[layer.name]
        report[layer.name] = [
            {
                "trait": t.display_name,
                "rarity": t.rarity,
                "count": counts[t.display_name],
                "observed": (counts[t.display_name] / total * 100) if total else 0.0,
            }
            for t in layer.traits
        ]
    return report
