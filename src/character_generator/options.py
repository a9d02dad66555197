"""Conjuntos de opciones fijos que ofrece el formulario, con sus etiquetas."""

from enum import Enum


class Style(str, Enum):
    PHOTOREALISTIC = "photorealistic"
    FANTASY_ART = "fantasy-art"
    CYBERPUNK = "cyberpunk"
    WATERCOLOR = "watercolor"
    ANIME = "anime"
    CARTOON = "cartoon"


class OutfitMode(str, Enum):
    PREDEFINED = "predefined"
    CUSTOM = "custom"


ENVIRONMENTS: dict[str, str] = {
    "a beach": "Beach",
    "a dense forest": "Forest",
    "a bustling city street": "City",
    "a futuristic sci-fi world": "Futuristic Sci-Fi World",
    "a medieval castle": "Medieval Castle",
    "a modern office": "Office",
    "a tranquil Japanese garden": "Japanese Garden",
    "a volcanic landscape": "Volcanic Landscape",
    "an underwater scene": "Underwater Scene",
    "a bustling market": "Bustling Market",
    "a cozy cafe": "Cozy Cafe",
    "a bustling spaceport": "Bustling Spaceport",
    "a serene mountaintop": "Serene Mountaintop",
    "a haunted mansion": "Haunted Mansion",
    "a vibrant underwater city": "Vibrant Underwater City",
}

STYLES: dict[str, str] = {
    Style.PHOTOREALISTIC.value: "Photorealistic",
    Style.FANTASY_ART.value: "Fantasy Art",
    Style.CYBERPUNK.value: "Cyberpunk",
    Style.WATERCOLOR.value: "Watercolor",
    Style.ANIME.value: "Anime",
    Style.CARTOON.value: "Cartoon",
}

OUTFITS: dict[str, str] = {
    "casual wear": "Casual",
    "a formal suit": "Formal",
    "sportswear": "Sportswear",
    "sci-fi armor": "Sci-fi Armor",
    "a medieval knight outfit": "Medieval Knight",
    "royal attire": "Royal Attire",
    "pirate costume": "Pirate Costume",
    "futuristic uniform": "Futuristic Uniform",
}

DEFAULT_ENVIRONMENT = "a beach"
DEFAULT_STYLE = Style.PHOTOREALISTIC.value
DEFAULT_OUTFIT = "casual wear"
DEFAULT_POSE = "sitting on a chair"
