"""
Pre-authored effect rule templates.

Spatial, page title and featured widget effects are fixed CSS keyed by a
closed keyword enum. Nothing here is interpolated from theme data except
through ``var()`` references, so the emitter's output space for effects
is exactly the set of templates below.
"""

from __future__ import annotations

from pagetheme.specs.keywords import FeaturedEffect, PageNameEffect, SpatialEffect

# =============================================================================
# Spatial effects (body.spatial-<keyword>)
# =============================================================================

SPATIAL_EFFECT_RULES: dict[SpatialEffect, str] = {
    SpatialEffect.NONE: "",
    SpatialEffect.GLASS: """\
body.spatial-glass {
  background: var(--page-background);
  backdrop-filter: blur(20px) saturate(180%);
  -webkit-backdrop-filter: blur(20px) saturate(180%);
}

body.spatial-glass .widget-item {
  backdrop-filter: blur(10px);
  -webkit-backdrop-filter: blur(10px);
}""",
    SpatialEffect.DEPTH: """\
body.spatial-depth {
  perspective: 1000px;
}

body.spatial-depth .widget-item {
  transform-style: preserve-3d;
  box-shadow: 0 10px 30px rgba(0, 0, 0, 0.2);
  transition: transform 0.3s ease;
}

body.spatial-depth .widget-item:hover {
  transform: translateZ(10px);
}""",
    SpatialEffect.FLOATING: """\
body.spatial-floating {
  padding: 2rem;
}

body.spatial-floating .page-container {
  background: var(--color-background-surface);
  border-radius: 24px;
  box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);
  padding: 2rem;
  max-width: 1200px;
  margin: 0 auto;
}""",
    SpatialEffect.TILT: """\
body.spatial-tilt .widget-item {
  will-change: transform;
  transition: transform 0.1s ease-out;
  transform-style: preserve-3d;
}""",
}

# Emitted only when the widget border effect is glow
GLOW_KEYFRAMES = """\
@keyframes glow-pulse {
  0%, 100% { opacity: 0.8; }
  50% { opacity: 1; }
}

@keyframes glow-rotate {
  0% { filter: hue-rotate(0deg); }
  100% { filter: hue-rotate(360deg); }
}"""


# =============================================================================
# Animated effects shared by the page title and the featured widget
# =============================================================================

# keyword -> (keyframes, declarations for the element carrying the class)
_ANIMATIONS: dict[str, tuple[str, str]] = {
    "jiggle": (
        """\
@keyframes fx-jiggle {
  0%, 100% { transform: rotate(0deg); }
  25% { transform: rotate(-2deg); }
  75% { transform: rotate(2deg); }
}""",
        "animation: fx-jiggle 0.6s var(--motion-easing-standard) infinite;",
    ),
    "burn": (
        """\
@keyframes fx-burn {
  0%, 100% { text-shadow: 0 0 4px #ff9500, 0 -2px 8px #ff5e00; }
  50% { text-shadow: 0 0 8px #ffcc00, 0 -4px 16px #ff2a00; }
}""",
        "animation: fx-burn 1.2s ease-in-out infinite;",
    ),
    "rotating-glow": (
        """\
@keyframes fx-rotating-glow {
  0% { filter: drop-shadow(0 0 6px var(--color-glow-primary)) hue-rotate(0deg); }
  100% { filter: drop-shadow(0 0 6px var(--color-glow-primary)) hue-rotate(360deg); }
}""",
        "animation: fx-rotating-glow 4s linear infinite;",
    ),
    "blink": (
        """\
@keyframes fx-blink {
  0%, 49% { opacity: 1; }
  50%, 100% { opacity: 0.2; }
}""",
        "animation: fx-blink 1s steps(1, end) infinite;",
    ),
    "pulse": (
        """\
@keyframes fx-pulse {
  0%, 100% { transform: scale(1); }
  50% { transform: scale(1.05); }
}""",
        "animation: fx-pulse 1.6s var(--motion-easing-standard) infinite;",
    ),
    "shake": (
        """\
@keyframes fx-shake {
  0%, 100% { transform: translateX(0); }
  20%, 60% { transform: translateX(-4px); }
  40%, 80% { transform: translateX(4px); }
}""",
        "animation: fx-shake 0.5s ease-in-out infinite;",
    ),
    "sparkles": (
        """\
@keyframes fx-sparkles {
  0%, 100% { filter: brightness(1); }
  50% { filter: brightness(1.4) drop-shadow(0 0 6px var(--color-accent-highlight)); }
}""",
        "animation: fx-sparkles 1.8s ease-in-out infinite;",
    ),
}


def spatial_effect_rules(effect: SpatialEffect) -> str:
    return SPATIAL_EFFECT_RULES[effect]


def animation_keyframes(*effects: PageNameEffect | FeaturedEffect) -> list[str]:
    """Keyframe blocks for the given effects, each emitted once, in order."""
    blocks: list[str] = []
    seen: set[str] = set()
    for effect in effects:
        if effect.value == "none" or effect.value in seen:
            continue
        seen.add(effect.value)
        blocks.append(_ANIMATIONS[effect.value][0])
    return blocks


def page_name_effect_rule(effect: PageNameEffect) -> str:
    """Rule for ``.page-title-effect-<keyword>``; empty for none."""
    if effect is PageNameEffect.NONE:
        return ""
    return _animation_rule(f".page-title-effect-{effect.value}", effect.value)


def featured_effect_rule(effect: FeaturedEffect) -> str:
    """Rule for ``.featured-widget.featured-effect-<keyword>``; empty for none."""
    if effect is FeaturedEffect.NONE:
        return ""
    return _animation_rule(f".featured-widget.featured-effect-{effect.value}", effect.value)


def _animation_rule(selector: str, keyword: str) -> str:
    declaration = _ANIMATIONS[keyword][1]
    return f"{selector} {{\n  {declaration}\n}}"
