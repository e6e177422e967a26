# src/spec_factory/export/html_packet.py
"""
Static HTML export of a design packet.

Pure transform: packet in, self-contained document bytes out. Images are
already data URLs, so the document needs no network access to render.
Uses the corrected spec when the audit produced one.
"""

from __future__ import annotations

import re
from datetime import date

from jinja2 import Environment, PackageLoader, select_autoescape

from ..ai_pipeline.schemas import DesignPacket

_env = Environment(
    loader=PackageLoader("spec_factory", "export/templates"),
    autoescape=select_autoescape(["html"]),
)


def _format_quantity(value: float | None) -> str:
    if value is None:
        return "-"
    return str(int(value)) if float(value).is_integer() else str(value)


_env.filters["qty"] = _format_quantity


def render_packet_html(packet: DesignPacket, generated_on: date | None = None) -> bytes:
    template = _env.get_template("design_packet.html")
    html = template.render(
        packet=packet,
        spec=packet.final_spec,
        generated_on=(generated_on or date.today()).strftime("%x"),
    )
    return html.encode("utf-8")


def export_filename(packet: DesignPacket) -> str:
    """<Product_Name>_DesignPacket.html"""
    name = re.sub(r"\s+", "_", packet.final_spec.product_name.strip())
    name = re.sub(r"[^\w\-]", "", name) or "Untitled_Project"
    return f"{name}_DesignPacket.html"
