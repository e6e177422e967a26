"""Tests for the static HTML packet export."""

from datetime import date

from spec_factory.ai_pipeline.schemas import SelfCheckResult, parse_spec
from spec_factory.export import export_filename, render_packet_html

from conftest import make_packet, sample_spec


def _render(packet) -> str:
    return render_packet_html(packet, generated_on=date(2026, 10, 19)).decode("utf-8")


def test_document_contains_packet_sections():
    html = _render(make_packet(marketing_pitch_url="data:audio/wav;base64,UklGRg=="))

    assert "<title>HaptiGuide Band - Design Packet</title>" in html
    assert "10/19/26" in html
    assert '<img src="data:image/png;base64,iVBORw0KGgo=" alt="Top View"/>' in html
    assert '<audio controls src="data:audio/wav;base64,UklGRg=="></audio>' in html
    assert "Generated Implementation (cpp)" in html
    assert "<li>Battery capacity unverified</li>" in html
    assert "<td>ToF sensor</td>" in html
    assert "<td>2</td>" in html


def test_model_text_is_escaped():
    html = _render(make_packet(spec_overrides={"summary": "<script>alert('x')</script>"}))
    assert "<script>alert" not in html
    assert "&lt;script&gt;" in html


def test_empty_sections():
    packet = make_packet(
        images=[],
        implementation_code=None,
        self_check=SelfCheckResult(issues=[], corrected_spec=None),
    )
    html = _render(packet)

    assert "Not generated." in html
    assert "No critical issues found." in html
    assert "Generated Implementation" not in html
    assert "Concept Video" not in html


def test_missing_material_and_quantity_render_as_dash():
    spec = sample_spec(partsList=[{"name": "Strap", "description": "Silicone strap"}])
    html = _render(make_packet(spec_overrides={"partsList": spec["partsList"]}))
    assert "<td>Strap</td><td>Silicone strap</td><td>-</td><td>-</td>" in html


def test_corrected_spec_is_rendered():
    corrected = parse_spec(sample_spec(productName="HaptiGuide Band Pro"))
    packet = make_packet(self_check=SelfCheckResult(issues=[], corrected_spec=corrected))

    html = _render(packet)
    assert "<h1>HaptiGuide Band Pro</h1>" in html
    assert export_filename(packet) == "HaptiGuide_Band_Pro_DesignPacket.html"


def test_filename_sanitized():
    assert export_filename(make_packet()) == "HaptiGuide_Band_DesignPacket.html"
    assert export_filename(make_packet(spec_overrides={"productName": "Ultra/Sonic: 3000!"})) == (
        "UltraSonic_3000_DesignPacket.html"
    )
    assert export_filename(make_packet(spec_overrides={"productName": "???"})) == (
        "Untitled_Project_DesignPacket.html"
    )


def test_validation_checks_and_issues_render_separately():
    html = _render(make_packet())

    checks_at = html.index("<h2>Validation Checks</h2>")
    issues_at = html.index("<h2>Self-Check Issues</h2>")
    assert checks_at < html.index("<li>Drop test from 1m</li>") < issues_at
    assert html.index("<li>Battery capacity unverified</li>") > issues_at


def test_validation_checks_section_omitted_when_empty():
    html = _render(make_packet(spec_overrides={"validationChecks": []}))
    assert "<h2>Validation Checks</h2>" not in html
    assert "<h2>Self-Check Issues</h2>" in html
