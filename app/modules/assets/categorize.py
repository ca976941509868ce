"""
Keyword categorization of delivered assets for the library views.

An asset lands in every category whose keywords appear in its label or
description; some keywords only count when they appear in the label.
"""

import re
from typing import Any, Dict, List, Tuple

from app.modules.requests.service import to_date

HEX_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")
RGB_PATTERN = re.compile(r"rgb\([^)]+\)")
# "HEX: #112233 | RGB: 17, 34, 51" as written by the admin color form
RGB_VALUES_PATTERN = re.compile(r"RGB:\s*(\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3})", re.IGNORECASE)

# category -> (label or description keywords, label-only keywords)
Rules = Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]]

CLIENT_RULES: Rules = {
    "logos": (("logo",), ("brand",)),
    "colors": (("color",), ()),
    "guidelines": (("guideline",), ("guide",)),
    "website": (("website",), ("web",)),
    "figma_links": (("figma",), ("product",)),
    "changelog": (("changelog",), ("change log",)),
}

# Admin views match on explicit keywords only
ADMIN_RULES: Rules = {
    **CLIENT_RULES,
    "logos": (("logo",), ()),
    "figma_links": (("figma",), ()),
}


def matches(asset: Dict[str, Any], anywhere: Tuple[str, ...], label_only: Tuple[str, ...] = ()) -> bool:
    label = (asset.get("label") or "").lower()
    description = (asset.get("description") or "").lower()
    if any(word in label or word in description for word in anywhere):
        return True
    return any(word in label for word in label_only)


def categories_for(asset: Dict[str, Any], admin: bool = False) -> List[str]:
    rules = ADMIN_RULES if admin else CLIENT_RULES
    return [name for name, (anywhere, label_only) in rules.items() if matches(asset, anywhere, label_only)]


def _file_format(mime_type: str) -> str:
    subtype = mime_type.split("/")[1] if mime_type and "/" in mime_type else ""
    return subtype.upper() or "FILE"


def _logo(a):
    return {
        "id": a["id"],
        "name": a.get("label"),
        "url": a.get("url", ""),
        "thumbnail": a.get("url", ""),
        "formats": [_file_format(a.get("mime_type") or "")],
    }


def _color(a):
    description = a.get("description") or ""
    hex_match = HEX_PATTERN.search(description)
    rgb_match = RGB_PATTERN.search(description)
    if rgb_match:
        rgb = rgb_match.group(0)
    else:
        values = RGB_VALUES_PATTERN.search(description)
        rgb = f"rgb({values.group(1)})" if values else "rgb(0, 0, 0)"
    return {
        "id": a["id"],
        "name": a.get("label"),
        "hex": hex_match.group(0) if hex_match else "#000000",
        "rgb": rgb,
    }


def _guideline(a):
    return {
        "id": a["id"],
        "name": a.get("label"),
        "type": a.get("mime_type") or "Document",
        "description": a.get("description"),
        "url": a.get("url", ""),
        "last_updated": to_date(a.get("created_at")),
    }


def _linked_file(a):
    return {
        "id": a["id"],
        "name": a.get("label"),
        "url": a.get("url", ""),
        "thumbnail": a.get("url", ""),
        "last_updated": to_date(a.get("created_at")),
    }


def _changelog_entry(a):
    return {
        "id": a["id"],
        "version": a.get("label"),
        "title": a.get("description") or a.get("label"),
        "changes": [a.get("description") or "No details available"],
        "date": to_date(a.get("created_at")),
    }


def build_library(assets: List[Dict[str, Any]], admin: bool = False) -> Dict[str, Any]:
    """Group assets (already carrying signed `url`s) into the library structure"""
    buckets: Dict[str, List[Dict[str, Any]]] = {name: [] for name in CLIENT_RULES}
    for asset in assets:
        for name in categories_for(asset, admin=admin):
            buckets[name].append(asset)
    return {
        "brand_assets": {
            "logos": [_logo(a) for a in buckets["logos"]],
            "colors": [_color(a) for a in buckets["colors"]],
            "guidelines": [_guideline(a) for a in buckets["guidelines"]],
        },
        "website_assets": [_linked_file(a) for a in buckets["website"]],
        "product_assets": {
            "figma_links": [_linked_file(a) for a in buckets["figma_links"]],
            "changelog": [_changelog_entry(a) for a in buckets["changelog"]],
        },
    }
