"""
Construcción del prompt

Convierte los parámetros elegidos por el usuario en el texto que acompaña a la
imagen en la petición al modelo. Es una función pura: mismos parámetros, mismo
prompt.

Responsabilidades:
- Traducir el estilo a su fragmento descriptivo
- Resolver la descripción del atuendo según el modo (predefinido o personalizado)
- Rellenar la plantilla del prompt
"""

from character_generator.options import OutfitMode, Style

DEFAULT_STYLE_CLAUSE = "A photorealistic image"
FALLBACK_OUTFIT = "appropriate clothing"

STYLE_CLAUSES: dict[str, str] = {
    Style.PHOTOREALISTIC.value: DEFAULT_STYLE_CLAUSE,
    Style.FANTASY_ART.value: "A fantasy art style digital painting",
    Style.CYBERPUNK.value: (
        "An image in a cyberpunk style with neon lighting and futuristic elements"
    ),
    Style.WATERCOLOR.value: "A watercolor painting",
    Style.ANIME.value: "An anime style image",
    Style.CARTOON.value: "A cartoon style image",
}

PROMPT_TEMPLATE = (
    "{style_clause} of the person from the provided photo, in the setting of "
    "{environment}. The person is wearing {outfit} and is {pose}. "
    "Maintain the person's identity and features from the original photo."
)


def style_clause(style: str) -> str:
    """Unknown styles fall back to the photorealistic clause."""
    return STYLE_CLAUSES.get(style, DEFAULT_STYLE_CLAUSE)


def resolve_outfit(mode: str, predefined_outfit: str, custom_outfit: str) -> str:
    if mode == OutfitMode.CUSTOM:
        return custom_outfit.strip() or FALLBACK_OUTFIT
    return predefined_outfit


def build_prompt(
    environment: str,
    style: str,
    outfit_mode: str,
    predefined_outfit: str,
    custom_outfit: str,
    pose: str,
) -> str:
    """
    Build the instruction text sent alongside the uploaded photo.

    Environment and pose are substituted verbatim. The model output depends on
    this exact wording, so the template must not be reformatted.
    """
    return PROMPT_TEMPLATE.format(
        style_clause=style_clause(style),
        environment=environment,
        outfit=resolve_outfit(outfit_mode, predefined_outfit, custom_outfit),
        pose=pose,
    )
