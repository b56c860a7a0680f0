"""
Cinematic LUT preset catalog and the lookup tables used to suggest presets
from an image's mood, style and color temperature.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LUTPreset:
    """A named cinematic grading look."""
    id: str
    name: str
    description: str
    category: str  # 'Cinematic', 'Vintage', 'Warm', 'Futuristic', 'Dramatic'
    intensity: int  # 0-100
    mood: str


PRESETS = (
    LUTPreset(
        id='teal-orange',
        name='Teal & Orange',
        description='Clásico cinematográfico con contrastes cálidos y fríos',
        category='Cinematic',
        intensity=85,
        mood='Dramático',
    ),
    LUTPreset(
        id='film-noir',
        name='Film Noir',
        description='Blanco y negro con altos contrastes y sombras profundas',
        category='Vintage',
        intensity=90,
        mood='Misterioso',
    ),
    LUTPreset(
        id='golden-hour',
        name='Golden Hour',
        description='Cálidos tonos dorados perfectos para retratos',
        category='Warm',
        intensity=75,
        mood='Romántico',
    ),
    LUTPreset(
        id='cyberpunk',
        name='Cyberpunk',
        description='Neones vibrantes y colores futuristas',
        category='Futuristic',
        intensity=95,
        mood='Futurista',
    ),
    LUTPreset(
        id='vintage-film',
        name='Vintage Film',
        description='Simulación de película analógica con grano',
        category='Vintage',
        intensity=70,
        mood='Nostálgico',
    ),
    LUTPreset(
        id='fire-glow',
        name='Fire Glow',
        description='Efectos de fuego y resplandor dramático',
        category='Dramatic',
        intensity=88,
        mood='Intenso',
    ),
)

MAX_SUGGESTIONS = 3

# Preset ids suggested per classification label, in priority order.
# Labels without an entry contribute nothing.
MOOD_SUGGESTIONS = {
    'Misterioso': ('film-noir', 'cyberpunk'),
    'Vibrante': ('cyberpunk', 'fire-glow'),
    'Cálido': ('golden-hour', 'vintage-film'),
    'Frío': ('teal-orange', 'film-noir'),
    'Dramático': ('fire-glow', 'film-noir'),
}

STYLE_SUGGESTIONS = {
    'Film Noir': ('film-noir', 'vintage-film'),
    'Cyberpunk': ('cyberpunk', 'fire-glow'),
    'Vintage': ('vintage-film', 'golden-hour'),
}

TEMPERATURE_SUGGESTIONS = {
    'warm': ('golden-hour', 'vintage-film'),
    'cool': ('teal-orange', 'cyberpunk'),
}


def get_preset(preset_id: str) -> LUTPreset:
    """Look up a preset by id. Raises KeyError for unknown ids."""
    for preset in PRESETS:
        if preset.id == preset_id:
            return preset
    raise KeyError(f"Unknown preset: {preset_id}")


def presets_by_category(category: str = 'all') -> list:
    if category == 'all':
        return list(PRESETS)
    return [p for p in PRESETS if p.category == category]


def suggest_presets(mood: str, style: str, temperature: str) -> list:
    """
    Union of the mood, style and temperature suggestions.

    Duplicates are dropped keeping the first occurrence, and the result is
    truncated to MAX_SUGGESTIONS ids.
    """
    suggestions = []
    for ids in (MOOD_SUGGESTIONS.get(mood, ()),
                STYLE_SUGGESTIONS.get(style, ()),
                TEMPERATURE_SUGGESTIONS.get(temperature, ())):
        for preset_id in ids:
            if preset_id not in suggestions:
                suggestions.append(preset_id)
    return suggestions[:MAX_SUGGESTIONS]
