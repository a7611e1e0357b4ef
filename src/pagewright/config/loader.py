#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, TypeVar, cast

from ..layout.spec import Color, LayoutSpec, StyleSpec, default_layout_spec
from ..text.metrics import DEFAULT_LINE_HEIGHT_FACTOR, FontTable, FpdfFontBackend
from .installer import DEFAULT_PAPER_SIZE, resolve_config_path

_T = TypeVar("_T")

DEFAULT_FACE = "default"


@dataclass(frozen=True)
class FontConfig:
    name: str
    family: str = "helvetica"
    regular: Path | None = None
    bold: Path | None = None
    rtl: bool = False
    line_height_factor: float = DEFAULT_LINE_HEIGHT_FACTOR


@dataclass(frozen=True)
class UiDefaults:
    quiet: bool = False
    no_color: bool = False


@dataclass(frozen=True)
class AppConfig:
    path: Path
    layout: LayoutSpec
    fonts: tuple[FontConfig, ...] = (FontConfig(DEFAULT_FACE),)
    alternate_face: str | None = None
    ui: UiDefaults = field(default_factory=UiDefaults)


def load_app_config(path: str | Path | None = None, *, paper_size: str | None = None) -> AppConfig:
    config_path = resolve_config_path(path, paper_size=paper_size)
    data = _load_toml(config_path)
    fonts, alternate = _parse_fonts(_get_dict(data, "fonts"), base_dir=config_path.parent)
    return AppConfig(
        path=config_path,
        layout=parse_layout(data, paper_size=paper_size),
        fonts=fonts,
        alternate_face=alternate,
        ui=_parse_ui_defaults(_get_dict(data, "ui")),
    )


def parse_layout(data: dict[str, object], *, paper_size: str | None = None) -> LayoutSpec:
    page_cfg = dict(_get_dict(data, "page"))
    size_value = page_cfg.pop("size", None)
    if size_value is not None and not isinstance(size_value, str):
        raise ValueError("page.size must be a string")
    base = default_layout_spec(paper_size or size_value or DEFAULT_PAPER_SIZE)
    if paper_size:
        # An explicit paper size wins over the file's page dimensions.
        page_cfg.pop("width_mm", None)
        page_cfg.pop("height_mm", None)
    return replace(
        base,
        page=_override(base.page, page_cfg, prefix="page"),
        pagination=_override(base.pagination, _get_dict(data, "pagination"), prefix="pagination"),
        spacing=_override(base.spacing, _get_dict(data, "spacing"), prefix="spacing"),
        box=_override(base.box, _get_dict(data, "box"), prefix="box"),
        header=_override(base.header, _get_dict(data, "header"), prefix="header"),
        styles=_parse_styles(_get_dict(data, "styles"), base.styles),
        colors=_parse_colors(_get_dict(data, "colors"), base.colors),
    )


def build_font_table(config: AppConfig) -> FontTable:
    """Create the font back ends; the returned table is not frozen yet."""
    backends = {
        font.name: FpdfFontBackend(
            font.name,
            family=font.family,
            regular=font.regular,
            bold=font.bold,
            supports_rtl=font.rtl,
            line_height_factor=font.line_height_factor,
        )
        for font in config.fonts
    }
    if DEFAULT_FACE not in backends:
        backends[DEFAULT_FACE] = FpdfFontBackend(DEFAULT_FACE)
    table = FontTable(backends.pop(DEFAULT_FACE))
    for name, backend in backends.items():
        table.register(backend, alternate=name == config.alternate_face)
    if config.alternate_face is not None and table.alternate_face != config.alternate_face:
        raise ValueError(f"fonts.alternate refers to an unknown face: {config.alternate_face}")
    return table


def _override(section: _T, cfg: dict[str, object], *, prefix: str) -> _T:
    known = {item.name: item for item in fields(cast(Any, section))}
    updates: dict[str, object] = {}
    for key, value in cfg.items():
        if key not in known:
            raise ValueError(f"{prefix}.{key} is not a recognized option")
        current = getattr(section, key)
        label = f"{prefix}.{key}"
        if isinstance(current, bool):
            updates[key] = _parse_bool(value, field=label, default=current)
        elif isinstance(current, int):
            updates[key] = _parse_int_strict(value, field=label)
        elif isinstance(current, float):
            updates[key] = _parse_float(value, field=label)
        else:
            updates[key] = _parse_str(value, field=label)
    return replace(cast(Any, section), **updates)


def _parse_styles(cfg: dict[str, object], defaults: dict[str, StyleSpec]) -> dict[str, StyleSpec]:
    styles = dict(defaults)
    for name, raw in cfg.items():
        label = f"styles.{name}"
        if not isinstance(raw, dict):
            raise ValueError(f"{label} must be a table")
        base = styles.get(name)
        if base is None:
            if "size_pt" not in raw:
                raise ValueError(f"{label}.size_pt is required")
            base = StyleSpec(size_pt=_parse_float(raw["size_pt"], field=f"{label}.size_pt"))
        style = _override(base, raw, prefix=label)
        if style.weight not in ("normal", "bold"):
            raise ValueError(f"{label}.weight must be 'normal' or 'bold'")
        styles[name] = style
    return styles


def _parse_colors(cfg: dict[str, object], defaults: dict[str, Color]) -> dict[str, Color]:
    colors = dict(defaults)
    for name, value in cfg.items():
        label = f"colors.{name}"
        if not isinstance(value, (list, tuple)) or len(value) != 3:
            raise ValueError(f"{label} must be a list of three integers")
        channels = tuple(_parse_int_strict(channel, field=label) for channel in value)
        if any(channel < 0 or channel > 255 for channel in channels):
            raise ValueError(f"{label} channels must be between 0 and 255")
        colors[name] = cast(Color, channels)
    return colors


def _parse_fonts(
    cfg: dict[str, object], *, base_dir: Path
) -> tuple[tuple[FontConfig, ...], str | None]:
    alternate: str | None = None
    fonts: list[FontConfig] = []
    for name, raw in cfg.items():
        if name == "alternate":
            alternate = _parse_str(raw, field="fonts.alternate").strip() or None
            continue
        label = f"fonts.{name}"
        if not isinstance(raw, dict):
            raise ValueError(f"{label} must be a table")
        fonts.append(
            FontConfig(
                name=name,
                family=_parse_str(raw.get("family", "helvetica"), field=f"{label}.family"),
                regular=_parse_font_path(raw.get("regular"), field=f"{label}.regular", base=base_dir),
                bold=_parse_font_path(raw.get("bold"), field=f"{label}.bold", base=base_dir),
                rtl=_parse_bool(raw.get("rtl"), field=f"{label}.rtl", default=False),
                line_height_factor=_parse_float(
                    raw.get("line_height_factor", DEFAULT_LINE_HEIGHT_FACTOR),
                    field=f"{label}.line_height_factor",
                ),
            )
        )
    if not fonts:
        fonts.append(FontConfig(DEFAULT_FACE))
    return tuple(fonts), alternate


def _parse_font_path(value: object, *, field: str, base: Path) -> Path | None:
    if value is None:
        return None
    text = _parse_str(value, field=field).strip()
    if not text:
        return None
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def _parse_ui_defaults(cfg: dict[str, object]) -> UiDefaults:
    return UiDefaults(
        quiet=_parse_bool(cfg.get("quiet"), field="ui.quiet", default=False),
        no_color=_parse_bool(cfg.get("no_color"), field="ui.no_color", default=False),
    )


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_str(value: object, *, field: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    return value


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"{field} must be a boolean")
    raise ValueError(f"{field} must be a boolean")


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError(f"{field} must be an integer")
        try:
            return int(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")


def _parse_float(value: object, *, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field} must be a number")
    return float(value)


__all__ = [
    "AppConfig",
    "FontConfig",
    "UiDefaults",
    "build_font_table",
    "load_app_config",
    "parse_layout",
]
