"""Declarative theme overrides for the elements that make up an icon.

A modification targets one property of one named element, optionally scoped
to a selection state::

    ("IconLabel", "text", "Shop")
    ("IconLabel", "textColor", "#ffcc00", "Selected")

Every element/property pair is declared in ``ELEMENT_SCHEMA`` together with
its value kind and built-in default. Values are validated and normalised when
a modification is applied, so resolution never has to second-guess them.

Resolution walks the per-icon table before the context-wide base table; in
each table the entry scoped to the current state wins over the unscoped one.
An icon in the Viewing state also picks up Selected-scoped entries, since
Viewing is a sub-state of Selected.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from overlay_icons.errors import ConfigurationError
from overlay_icons.logging_utils import get_logger
from overlay_icons.state import IconState, parse_state

_LOGGER = get_logger("Theme")

FONT_FAMILIES = (
    "Arial",
    "Bangers",
    "BuilderSans",
    "Creepster",
    "DenkOne",
    "Fondamento",
    "FredokaOne",
    "GothamSSm",
    "GrenzeGotisch",
    "IndieFlower",
    "JosefinSans",
    "Jura",
    "Kalam",
    "LuckiestGuy",
    "Merriweather",
    "Michroma",
    "Montserrat",
    "Nunito",
    "Oswald",
    "PatrickHand",
    "PermanentMarker",
    "Roboto",
    "RobotoCondensed",
    "RobotoMono",
    "Sarpanch",
    "SourceSansPro",
    "SpecialElite",
    "TitilliumWeb",
    "Ubuntu",
)
FONT_WEIGHTS = ("Thin", "ExtraLight", "Light", "Regular", "Medium", "SemiBold", "Bold", "ExtraBold", "Heavy")
FONT_STYLES = ("Normal", "Italic")

IMAGE_SCHEME = "asset://"
FONT_ID_SCHEME = "font://"
_FONT_LINK_RE = re.compile(r"^fonts/families/(?P<family>[A-Za-z0-9]+)\.json$")
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _check_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    return value


def _check_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _check_unit(value: Any) -> float:
    number = _check_number(value)
    if not 0.0 <= number <= 1.0:
        raise ValueError(f"expected a value between 0 and 1, got {value!r}")
    return number


def _check_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


def _check_text(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _check_color(value: Any) -> str:
    if isinstance(value, str) and _HEX_COLOR_RE.match(value.strip()):
        token = value.strip().lower()
        if len(token) == 4:
            token = "#" + "".join(ch * 2 for ch in token[1:])
        return token
    if isinstance(value, (tuple, list)) and len(value) == 3:
        channels = [_check_int(channel) for channel in value]
        if all(0 <= channel <= 255 for channel in channels):
            return "#{:02x}{:02x}{:02x}".format(*channels)
    raise ValueError(f"expected a #rrggbb color or an (r, g, b) tuple, got {value!r}")


def normalize_image(value: Any) -> str:
    """Accept an asset id (int or digit string) or a complete asset string."""
    if isinstance(value, bool):
        raise ValueError(f"invalid image reference {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"invalid image id {value!r}")
        return f"{IMAGE_SCHEME}{value}"
    if isinstance(value, str):
        token = value.strip()
        if token == "":
            return ""
        if token.isdigit():
            return f"{IMAGE_SCHEME}{token}"
        if "://" in token:
            return token
    raise ValueError(f"invalid image reference {value!r}")


def _family_lookup(name: str) -> Optional[str]:
    lowered = name.lower()
    for family in FONT_FAMILIES:
        if family.lower() == lowered:
            return family
    return None


def normalize_font(value: Any) -> str:
    """Accept a family name, a numeric font id, or a ``fonts/families/<Name>.json`` link."""
    if isinstance(value, bool):
        raise ValueError(f"invalid font reference {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"invalid font id {value!r}")
        return f"{FONT_ID_SCHEME}{value}"
    if isinstance(value, str):
        token = value.strip()
        if token.isdigit() and int(token) > 0:
            return f"{FONT_ID_SCHEME}{token}"
        match = _FONT_LINK_RE.match(token)
        family = _family_lookup(match.group("family") if match else token)
        if family is not None:
            return family
    raise ValueError(f"unknown font {value!r}")


def _choice(options: Sequence[str]) -> Callable[[Any], str]:
    def _check(value: Any) -> str:
        if isinstance(value, str):
            for option in options:
                if option.lower() == value.strip().lower():
                    return option
        raise ValueError(f"expected one of {', '.join(options)}, got {value!r}")

    return _check


_BACKGROUND = {
    "backgroundColor": (_check_color, "#000000"),
    "backgroundTransparency": (_check_unit, 0.0),
    "visible": (_check_bool, True),
}
_CORNER = {
    "cornerScale": (_check_number, 1.0),
    "cornerOffset": (_check_int, 0),
}
_GRADIENT = {
    "enabled": (_check_bool, False),
    "color": (_check_color, "#ffffff"),
    "rotation": (_check_number, 0.0),
}
_PADDING = {
    "width": (_check_int, 0),
    "visible": (_check_bool, True),
}

ELEMENT_SCHEMA: Mapping[str, Mapping[str, Tuple[Callable[[Any], Any], Any]]] = {
    "Widget": {
        "minimumWidth": (_check_int, 44),
        "minimumHeight": (_check_int, 44),
        "layoutOrder": (_check_int, 0),
        "borderSize": (_check_int, 4),
        "visible": (_check_bool, True),
    },
    "IconButton": {**_BACKGROUND, "backgroundTransparency": (_check_unit, 0.3)},
    "IconCorners": dict(_CORNER),
    "Selection": {
        "visible": (_check_bool, False),
        "rotationSpeed": (_check_number, 1.0),
        "color": (_check_color, "#ffffff"),
    },
    "SelectionGradient": dict(_GRADIENT),
    "IconImage": {
        "image": (normalize_image, ""),
        "imageColor": (_check_color, "#ffffff"),
        "imageTransparency": (_check_unit, 0.0),
        "visible": (_check_bool, True),
    },
    "IconImageScale": {"value": (_check_number, 0.5)},
    "IconImageCorner": {**_CORNER, "cornerScale": (_check_number, 0.0)},
    "IconImageRatio": {"aspectRatio": (_check_number, 1.0)},
    "IconLabel": {
        "text": (_check_text, ""),
        "textSize": (_check_int, 16),
        "textColor": (_check_color, "#ffffff"),
        "textTransparency": (_check_unit, 0.0),
        "fontFamily": (normalize_font, "SourceSansPro"),
        "fontWeight": (_choice(FONT_WEIGHTS), "Medium"),
        "fontStyle": (_choice(FONT_STYLES), "Normal"),
        "visible": (_check_bool, True),
    },
    "IconLabelContainer": {"visible": (_check_bool, True)},
    "IconSpot": {**_BACKGROUND, "backgroundColor": (_check_color, "#e0e0e0"), "backgroundTransparency": (_check_unit, 1.0)},
    "IconSpotGradient": dict(_GRADIENT),
    "IconOverlay": {**_BACKGROUND, "backgroundColor": (_check_color, "#ffffff"), "backgroundTransparency": (_check_unit, 0.925)},
    "IconGradient": dict(_GRADIENT),
    "ClickRegion": {"active": (_check_bool, True), "selectable": (_check_bool, True)},
    "Menu": {
        "maxIcons": (_check_int, 4),
        "scrollBarThickness": (_check_int, 3),
        "visible": (_check_bool, True),
    },
    "ContentsList": {"padding": (_check_int, 4)},
    "Dropdown": {
        **_BACKGROUND,
        "backgroundColor": (_check_color, "#101010"),
        "backgroundTransparency": (_check_unit, 0.1),
        "maxIcons": (_check_number, 3.5),
    },
    "Notice": {
        "backgroundColor": (_check_color, "#f54a4a"),
        "visible": (_check_bool, True),
    },
    "NoticeLabel": {
        "textColor": (_check_color, "#ffffff"),
        "textSize": (_check_int, 12),
    },
    "PaddingLeft": dict(_PADDING),
    "PaddingRight": dict(_PADDING),
    "PaddingCenter": dict(_PADDING),
    "Contents": {"visible": (_check_bool, True)},
}

ThemeKey = Tuple[str, str, Optional[IconState]]
ModificationInput = Union["ThemeModification", Sequence[Any]]


@dataclass(frozen=True)
class ThemeModification:
    element: str
    prop: str
    value: Any
    state: Optional[IconState] = None

    @property
    def key(self) -> ThemeKey:
        return (self.element, self.prop, self.state)


def validate_modification(entry: ModificationInput) -> ThemeModification:
    """Check one entry against ELEMENT_SCHEMA and return it normalised."""
    if isinstance(entry, ThemeModification):
        element, prop, value, state = entry.element, entry.prop, entry.value, entry.state
    elif isinstance(entry, (tuple, list)) and len(entry) in (3, 4):
        element, prop, value = entry[0], entry[1], entry[2]
        state = entry[3] if len(entry) == 4 else None
    else:
        raise ConfigurationError(f"Malformed theme modification {entry!r}")

    properties = ELEMENT_SCHEMA.get(element) if isinstance(element, str) else None
    if properties is None:
        raise ConfigurationError(f"Unknown theme element {element!r}")
    prop_schema = properties.get(prop) if isinstance(prop, str) else None
    if prop_schema is None:
        raise ConfigurationError(f"Unknown property {prop!r} for element {element!r}")
    scope = parse_state(state)
    check, _default = prop_schema
    try:
        normalised = check(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {element}.{prop}: {exc}") from exc
    return ThemeModification(element, prop, normalised, scope)


def _is_single(modifications: Any) -> bool:
    if isinstance(modifications, ThemeModification):
        return True
    return (
        isinstance(modifications, (tuple, list))
        and len(modifications) in (3, 4)
        and isinstance(modifications[0], str)
    )


def parse_modifications(modifications: Any) -> Tuple[List[ThemeModification], List[str]]:
    """Split a batch into validated modifications and failure messages."""
    if _is_single(modifications):
        entries: Iterable[Any] = [modifications]
    elif isinstance(modifications, (tuple, list)):
        entries = modifications
    else:
        return [], [f"Malformed theme modification {modifications!r}"]

    valid: List[ThemeModification] = []
    failures: List[str] = []
    for entry in entries:
        try:
            valid.append(validate_modification(entry))
        except ConfigurationError as exc:
            failures.extend(exc.failures)
    return valid, failures


def raise_for_failures(failures: List[str]) -> None:
    if not failures:
        return
    if len(failures) == 1:
        raise ConfigurationError(failures[0], failures)
    raise ConfigurationError(f"{len(failures)} theme modifications rejected: {'; '.join(failures)}", failures)


def scope_chain(state: IconState) -> Tuple[Optional[IconState], ...]:
    if state is IconState.VIEWING:
        return (IconState.VIEWING, IconState.SELECTED, None)
    return (state, None)


class ThemeTable:
    """Ordered override entries keyed by (element, property, state scope)."""

    def __init__(self) -> None:
        self._entries: Dict[ThemeKey, Any] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def apply(self, modifications: Any) -> List[ThemeModification]:
        """Apply every valid entry, then raise ConfigurationError if any were rejected."""
        valid, failures = parse_modifications(modifications)
        for modification in valid:
            self._entries[modification.key] = modification.value
        if failures:
            _LOGGER.warning("Rejected theme modifications: %s", "; ".join(failures))
        raise_for_failures(failures)
        return valid

    def lookup(self, element: str, prop: str, state: IconState) -> Tuple[bool, Any]:
        for scope in scope_chain(state):
            key = (element, prop, scope)
            if key in self._entries:
                return True, self._entries[key]
        return False, None

    def entries(self) -> List[ThemeModification]:
        return [ThemeModification(element, prop, value, state) for (element, prop, state), value in self._entries.items()]

    def clear(self) -> None:
        self._entries.clear()


def _require_element(element: str) -> Mapping[str, Tuple[Callable[[Any], Any], Any]]:
    properties = ELEMENT_SCHEMA.get(element)
    if properties is None:
        raise ConfigurationError(f"Unknown theme element {element!r}")
    return properties


def resolve_property(element: str, prop: str, state: IconState, *tables: ThemeTable) -> Any:
    """Resolve one value; ``tables`` are ordered most specific first."""
    properties = _require_element(element)
    if prop not in properties:
        raise ConfigurationError(f"Unknown property {prop!r} for element {element!r}")
    for table in tables:
        found, value = table.lookup(element, prop, state)
        if found:
            return value
    return properties[prop][1]


def resolve_element(element: str, state: IconState, *tables: ThemeTable) -> Dict[str, Any]:
    properties = _require_element(element)
    return {prop: resolve_property(element, prop, state, *tables) for prop in properties}
