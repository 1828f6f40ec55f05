# bazar/services/fabrics.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

from ..errors import ValidationError


@dataclass(frozen=True)
class FabricSpec:
    name: str
    subtypes: Tuple[str, ...]
    units: Tuple[str, ...]
    default_unit: str


FABRIC_CONFIG: Dict[str, FabricSpec] = {
    "gabardine": FabricSpec(
        "Gabardine", tuple(f"Type {i}" for i in range(1, 13)), ("mètre", "rouleau"), "mètre"
    ),
    "bazin": FabricSpec(
        "Bazin", ("Riche", "Getzner", "Superfanga", "Doré", "Impérial"), ("mètre",), "mètre"
    ),
    "soie": FabricSpec(
        "Soie",
        ("uni", "perlée Bazin", "Bazin", "fleurie", "plissée", "motif pagne"),
        ("pièce", "mètre"),
        "mètre",
    ),
    "velours": FabricSpec("Velours", ("Côtelé", "Cisélé", "De soie"), ("mètre",), "mètre"),
    "satin": FabricSpec("Satin", ("De Paris", "Duchesse", "riche", "Coton"), ("mètre",), "mètre"),
    "kente": FabricSpec(
        "Kente",
        ("Adweneasa", "Sika Futuro", "Oyokoman", "traditionnel", "Asasia", "Babadua"),
        ("pièce", "mètre"),
        "mètre",
    ),
    "lin": FabricSpec("Lin", ("Naturel", "Lavé", "Mélangé", "Brodé", "Fin"), ("mètre",), "mètre"),
    "mousseline": FabricSpec(
        "Mousseline", ("De soie", "De coton", "Brodée", "Imprimée", "Légère"), ("mètre",), "mètre"
    ),
    "pagne": FabricSpec(
        "Pagne",
        ("Wax", "Super Wax", "Fancy", "Java", "Woodin", "Vlisco"),
        ("complet", "yards", "mètre"),
        "complet",
    ),
    "moustiquaire": FabricSpec(
        "Moustiquaire", ("Simple", "Brodée", "Renforcée", "Colorée"), ("pièce", "mètre"), "mètre"
    ),
    "brocart": FabricSpec(
        "Brocart", ("Damassé", "Jacquard", "Métallique", "Relief", "Traditionnel"), ("mètre",), "mètre"
    ),
    "bogolan": FabricSpec(
        "Bogolan",
        ("Traditionnel", "Moderne", "Bamanan", "Ségovien", "Minianka"),
        ("bande", "mètre"),
        "mètre",
    ),
    "dashiki": FabricSpec(
        "Dashiki", ("Classique", "Brodé", "Angelina", "Festif", "Royal"), ("pièce",), "pièce"
    ),
    "adire": FabricSpec(
        "Adire", ("Eleko", "Alabere", "Oniko", "Batik", "Moderne"), ("yard", "mètre"), "mètre"
    ),
    "ankara": FabricSpec(
        "Ankara",
        ("Hollandais", "Hitarget", "ABC", "Premium", "Phoenix"),
        ("yards", "complet", "mètre"),
        "mètre",
    ),
    "super": FabricSpec(
        "Super", ("cent", "cachemire", "deux cent", "Indigo", "Toto"), ("mètre",), "mètre"
    ),
    "tulle": FabricSpec("Tulle", ("doux", "Toto"), ("mètre",), "mètre"),
    "accessoires": FabricSpec(
        "Accessoires", ("billet", "cachemire", "deux cent", "Indigo", "Toto"), ("mètre",), "mètre"
    ),
    "dentelle": FabricSpec(
        "Dentelle", ("cérémoniev16", "v10", "uni", "guipure", "coton"), ("mètre",), "mètre"
    ),
}


def fabric_key(fabric_type: Optional[str]) -> Optional[str]:
    """Catalog key for a stored fabric type ("Super" and "super" are the same)."""
    if not fabric_type:
        return None
    key = fabric_type.strip().lower()
    return key if key in FABRIC_CONFIG else None


def is_fabric_type(fabric_type: Optional[str]) -> bool:
    return fabric_key(fabric_type) is not None


def get_fabric_units(fabric_type: str) -> List[str]:
    key = fabric_key(fabric_type)
    if key is None:
        raise ValidationError(f"unknown fabric type: {fabric_type!r}")
    return list(FABRIC_CONFIG[key].units)


def get_default_unit(fabric_type: str) -> str:
    key = fabric_key(fabric_type)
    if key is None:
        raise ValidationError(f"unknown fabric type: {fabric_type!r}")
    return FABRIC_CONFIG[key].default_unit


def validate_fabric(fabric_type: str, subtype: Optional[str], unit: Optional[str]) -> str:
    """
    Check a fabric type / subtype / unit combination coming from the admin
    product form. Returns the unit to store (the type's default when omitted).
    """
    key = fabric_key(fabric_type)
    if key is None:
        raise ValidationError(f"unknown fabric type: {fabric_type!r}")
    spec = FABRIC_CONFIG[key]
    if subtype and subtype not in spec.subtypes:
        raise ValidationError(f"unknown subtype {subtype!r} for {spec.name}")
    unit = unit or spec.default_unit
    if unit not in spec.units:
        raise ValidationError(f"{spec.name} is not sold by {unit!r}")
    return unit


def catalog() -> List[dict]:
    out = []
    for key, spec in FABRIC_CONFIG.items():
        data = asdict(spec)
        data["key"] = key
        data["subtypes"] = list(spec.subtypes)
        data["units"] = list(spec.units)
        out.append(data)
    return out
